from __future__ import annotations

from typing import Any, Mapping, Union

from .config_loader import ExtractorConfig, load_extractor_config
from .extractor import ContactExtractor, ExtractionWorker, extract, extract_with_timeout
from .models import ContactRecord
from .normalization import (
    canonicalize_profile_url,
    normalize_phone,
    normalize_text_key,
    read_text_csv,
    safe_get,
    warn_missing,
)
from .recognizers import DEFAULT_JOB_TITLES, FieldRecognizer, default_recognizers

__all__ = [
    "ContactExtractor",
    "ContactRecord",
    "DEFAULT_JOB_TITLES",
    "ExtractionWorker",
    "ExtractorConfig",
    "FieldRecognizer",
    "canonicalize_profile_url",
    "default_recognizers",
    "ensure_contact_record",
    "extract",
    "extract_with_timeout",
    "load_config",
    "load_extractor_config",
    "normalize_phone",
    "normalize_text_key",
    "read_text_csv",
    "safe_get",
    "warn_missing",
]


def load_config(args: Any) -> ExtractorConfig:
    return load_extractor_config(args)


def ensure_contact_record(obj: Union[ContactRecord, Mapping[str, Any], None]) -> ContactRecord:
    """Accept a record, its ``to_dict()`` form (e.g. a JSON output row) or ``None``."""
    if obj is None:
        return ContactRecord()
    if isinstance(obj, ContactRecord):
        return obj
    if isinstance(obj, Mapping):
        return ContactRecord.from_mapping(obj)
    raise TypeError(f"Expected a ContactRecord or mapping, got {type(obj).__name__}")
