from __future__ import annotations

import logging
import os
import re
from typing import Any, Iterable, List, Optional, Set

import pandas as pd

logger = logging.getLogger(__name__)

# whitespace and ASCII hyphens are cosmetic; digits, "+", "(", ")" and "." are kept
_PHONE_SEPARATORS_RE = re.compile(r"[\s\-]+")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]{0,15}://")

PROFILE_URL_PREFIX = "https://"


def normalize_text_key(value: Optional[str]) -> str:
    # same folding recognize_job_title applies before its substring test
    return " ".join((value or "").split()).casefold()


def normalize_phone(value: str) -> str:
    """
    Strip whitespace and hyphens from a captured phone number.

    Digits, a leading ``+``, parentheses and dots are kept as typed; no
    attempt is made to reformat into E.164.
    """
    return _PHONE_SEPARATORS_RE.sub("", value or "")


def canonicalize_profile_url(value: str) -> str:
    """
    Rewrite a ``linkedin.com/in/<handle>`` path into ``https://linkedin.com/in/<handle>``.

    Any scheme or ``www.`` host prefix in front of the path is discarded and the
    result is lower-cased, so feeding the output back in returns it unchanged.
    """
    s = (value or "").strip()
    if not s:
        return ""
    s = _SCHEME_RE.sub("", s).lower().rstrip("/")
    if s.startswith("www."):
        s = s[len("www.") :]
    return f"{PROFILE_URL_PREFIX}{s}"


def dedupe_vocabulary(values: Iterable[str]) -> List[str]:
    seen: Set[str] = set()
    results: List[str] = []
    for value in values:
        cleaned = str(value or "").strip()
        key = normalize_text_key(cleaned)
        if key and key not in seen:
            seen.add(key)
            results.append(cleaned)
    return results


def read_text_csv(path: Optional[str]) -> pd.DataFrame:
    if not path:
        return pd.DataFrame()
    try:
        return pd.read_csv(path, dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        logger.warning("Input CSV is empty: %s", path)
        return pd.DataFrame()


def safe_get(row: Any, key: Optional[str]) -> str:
    """Read one input cell as stripped text; absent keys, ``None`` and NaN read as ``""``."""
    if not key or not hasattr(row, "get"):
        return ""
    value = row.get(key)
    if value is None or value is pd.NA or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def warn_missing(path: Optional[str], label: str) -> bool:
    """Log and return ``True`` when ``path`` is not a readable file, so the caller skips it."""
    if path and os.path.isfile(path):
        return False
    if path and os.path.isdir(path):
        logger.warning("%s is a directory, skipping: %s", label, path)
    else:
        logger.warning("%s not found, skipping: %s", label, path)
    return True
