from __future__ import annotations

import argparse
import csv
import json
import logging
from typing import List, Optional, Tuple

import pandas as pd

from .common import (
    ContactExtractor,
    ContactRecord,
    ExtractionWorker,
    load_config,
    read_text_csv,
    safe_get,
    warn_missing,
)
from .config_loader import OUTPUT_FORMATS, ExtractorConfig
from .logging_utils import configure_logging

logger = logging.getLogger(__name__)

OUTPUT_COLUMNS = ["source", "source_row_id", *ContactRecord.FIELDS]
OUTPUT_BASENAME = "extracted_contacts"


def _load_text_files(paths: List[str]) -> List[Tuple[str, str, str]]:
    items: List[Tuple[str, str, str]] = []
    for path in paths:
        if warn_missing(path, "Text file"):
            continue
        with open(path, "r", encoding="utf-8", errors="ignore") as handle:
            items.append((path, "0", handle.read()))
    return items


def _load_csv_rows(config: ExtractorConfig) -> List[Tuple[str, str, str]]:
    path = config.inputs.input_csv
    if not path or warn_missing(path, "Input CSV"):
        return []
    df = read_text_csv(path)
    if df.empty:
        return []
    text_column = config.inputs.text_column
    if text_column not in df.columns:
        raise ValueError(f"Input CSV {path} has no {text_column!r} column")
    id_column = config.inputs.id_column
    if id_column and id_column not in df.columns:
        logger.warning("Id column %r missing from %s; using row positions", id_column, path)
        id_column = None
    items: List[Tuple[str, str, str]] = []
    for idx, row in df.iterrows():
        row_id = safe_get(row, id_column) if id_column else str(idx)
        items.append((path, row_id, safe_get(row, text_column)))
    return items


def build(args: argparse.Namespace, config: Optional[ExtractorConfig] = None) -> pd.DataFrame:
    config = config or load_config(args)
    extractor = ContactExtractor.from_config(config)

    inputs = _load_text_files(config.inputs.text_files) + _load_csv_rows(config)
    if not inputs:
        logger.warning("No input texts to extract from")

    rows = []
    with ExtractionWorker(extractor, config.runtime.timeout_seconds) as worker:
        for source, row_id, text in inputs:
            record = worker.extract(text)
            if record.is_empty():
                logger.info("Nothing recognized in %s:%s", source, row_id)
            rows.append({"source": source, "source_row_id": row_id, **record.to_dict()})

    return pd.DataFrame(rows, columns=OUTPUT_COLUMNS)


def write_output(df: pd.DataFrame, config: ExtractorConfig) -> str:
    out_dir = config.outputs.dir
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / f"{OUTPUT_BASENAME}.{config.outputs.format}"
    if config.outputs.format == "json":
        with open(out_path, "w", encoding="utf-8") as handle:
            json.dump(df.to_dict(orient="records"), handle, ensure_ascii=False, indent=2)
    else:
        df.to_csv(str(out_path), index=False, encoding="utf-8", quoting=csv.QUOTE_ALL)
    return str(out_path)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Extract contact fields (email, phone, LinkedIn, job title) from free text."
    )
    parser.add_argument("--config", type=str, default=None, help="Path to YAML config.")
    parser.add_argument(
        "--text-file",
        dest="text_files",
        action="append",
        default=None,
        help="Plain-text input; may be repeated.",
    )
    parser.add_argument("--input-csv", type=str, default=None)
    parser.add_argument("--text-column", type=str, default=None)
    parser.add_argument("--id-column", type=str, default=None)
    parser.add_argument("--out-dir", type=str, default=None)
    parser.add_argument("--format", dest="output_format", choices=OUTPUT_FORMATS, default=None)
    parser.add_argument(
        "--timeout", type=float, default=None, help="Seconds allowed per text (0 disables)."
    )
    parser.add_argument(
        "--job-titles", nargs="*", default=None, help="Replace the job title vocabulary, in order."
    )
    parser.add_argument("--log-level", type=str, default=None, help="Override logging level")
    args = parser.parse_args()

    config = load_config(args)
    configure_logging(config, level_override=args.log_level)
    df = build(args, config=config)
    out_path = write_output(df, config)

    logger.info("Saved: %s", out_path)
    print(f"Saved: {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
