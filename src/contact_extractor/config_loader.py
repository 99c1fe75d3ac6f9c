from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml  # type: ignore[import-untyped]

OUTPUT_FORMATS = ("csv", "json")
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class InputsConfig:
    text_files: List[str] = field(default_factory=list)
    input_csv: Optional[str] = None
    text_column: str = "text"
    id_column: Optional[str] = None


@dataclass
class OutputsConfig:
    dir: Path
    format: str = "csv"


@dataclass
class RecognitionConfig:
    job_titles: Optional[list[str]] = None


@dataclass
class RuntimeConfig:
    timeout_seconds: float = 0.0


@dataclass
class LoggingConfig:
    level: str = "WARNING"
    format: str = DEFAULT_LOG_FORMAT


@dataclass
class ExtractorConfig:
    inputs: InputsConfig
    outputs: OutputsConfig
    recognition: RecognitionConfig
    runtime: RuntimeConfig
    logging: LoggingConfig


def _load_yaml(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    with open(path, "r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def load_extractor_config(args: argparse.Namespace) -> ExtractorConfig:
    config_data = _load_yaml(getattr(args, "config", None))
    inputs_cfg = config_data.get("inputs", {}) or {}
    outputs_cfg = config_data.get("outputs", {}) or {}
    recognition_cfg = config_data.get("recognition", {}) or {}
    runtime_cfg = config_data.get("runtime", {}) or {}
    logging_cfg = config_data.get("logging", {}) or {}

    inputs = InputsConfig(
        text_files=list(
            getattr(args, "text_files", None) or inputs_cfg.get("text_files") or []
        ),
        input_csv=getattr(args, "input_csv", None) or inputs_cfg.get("input_csv"),
        text_column=getattr(args, "text_column", None) or inputs_cfg.get("text_column") or "text",
        id_column=getattr(args, "id_column", None) or inputs_cfg.get("id_column"),
    )

    outputs_dir = Path(getattr(args, "out_dir", None) or outputs_cfg.get("dir") or os.getcwd())
    output_format = str(
        getattr(args, "output_format", None) or outputs_cfg.get("format") or "csv"
    ).lower()
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(
            f"Unsupported output format {output_format!r}; expected one of {OUTPUT_FORMATS}"
        )
    outputs = OutputsConfig(dir=outputs_dir, format=output_format)

    job_titles = getattr(args, "job_titles", None) or recognition_cfg.get("job_titles")
    recognition = RecognitionConfig(
        job_titles=[str(title) for title in job_titles] if job_titles else None
    )

    arg_timeout = getattr(args, "timeout", None)
    runtime = RuntimeConfig(
        timeout_seconds=float(
            arg_timeout if arg_timeout is not None else runtime_cfg.get("timeout_seconds", 0) or 0
        ),
    )

    arg_level = getattr(args, "log_level", None)
    effective_level = (arg_level or logging_cfg.get("level") or "WARNING").upper()
    logging_config = LoggingConfig(
        level=effective_level,
        format=str(logging_cfg.get("format") or DEFAULT_LOG_FORMAT),
    )

    return ExtractorConfig(
        inputs=inputs,
        outputs=outputs,
        recognition=recognition,
        runtime=runtime,
        logging=logging_config,
    )
