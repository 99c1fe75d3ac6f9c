from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import partial
from typing import Callable, Iterable, Optional, Sequence, Tuple

from .normalization import canonicalize_profile_url, dedupe_vocabulary, normalize_phone

logger = logging.getLogger(__name__)

# All quantifiers are bounded so a scan stays linear in the length of the text.
EMAIL_RE = re.compile(
    r"(?<![A-Za-z0-9._-])[A-Za-z0-9._-]{1,64}@[A-Za-z0-9.-]{1,253}\.[A-Za-z]{2,6}"
)
PHONE_RE = re.compile(
    r"(?:\+|00)?[0-9]{1,3}[-. ]?\(?[0-9]{2,4}\)?[-. ]?[0-9]{3,4}[-. ]?[0-9]{3,4}"
)
PROFILE_RE = re.compile(r"linkedin\.com/in/[A-Za-z0-9-]{1,100}", re.IGNORECASE)

# Order is precedence: the first entry found anywhere in the text wins, so
# specific titles must come before the general ones they contain.
DEFAULT_JOB_TITLES: Tuple[str, ...] = (
    "Software Engineer",
    "Frontend Developer",
    "Backend Developer",
    "Full Stack Developer",
    "Product Manager",
    "UI/UX Designer",
    "Graphic Designer",
    "Marketing Manager",
    "Sales Manager",
    "Accountant",
    "HR Manager",
    "CEO",
    "Founder",
    "Consultant",
    "Doctor",
    "Engineer",
    "Developer",
    "Designer",
    "Manager",
)

Scanner = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class FieldRecognizer:
    """A named scan: ``scan(text)`` returns the normalized value for ``field`` or ``None``."""

    field: str
    scan: Scanner

    def __call__(self, text: str) -> Optional[str]:
        return self.scan(text)


def recognize_email(text: str) -> Optional[str]:
    match = EMAIL_RE.search(text)
    return match.group(0) if match else None


def recognize_phone(text: str) -> Optional[str]:
    # digits inside an email address are never a phone number
    match = PHONE_RE.search(EMAIL_RE.sub("\n", text))
    if not match:
        return None
    return normalize_phone(match.group(0)) or None


def recognize_website(text: str) -> Optional[str]:
    match = PROFILE_RE.search(text)
    if not match:
        return None
    return canonicalize_profile_url(match.group(0))


def recognize_job_title(text: str, vocabulary: Sequence[str] = DEFAULT_JOB_TITLES) -> Optional[str]:
    haystack = text.casefold()
    for title in vocabulary:
        if title.casefold() in haystack:
            return title
    return None


def build_vocabulary(job_titles: Optional[Iterable[str]]) -> Tuple[str, ...]:
    if job_titles is None:
        return DEFAULT_JOB_TITLES
    vocabulary = tuple(dedupe_vocabulary(job_titles))
    if not vocabulary:
        logger.warning("Configured job title vocabulary is empty; no titles will be recognized")
    return vocabulary


def default_recognizers(job_titles: Optional[Iterable[str]] = None) -> Tuple[FieldRecognizer, ...]:
    vocabulary = build_vocabulary(job_titles)
    return (
        FieldRecognizer("email", recognize_email),
        FieldRecognizer("phone", recognize_phone),
        FieldRecognizer("website", recognize_website),
        FieldRecognizer("job_title", partial(recognize_job_title, vocabulary=vocabulary)),
    )


__all__ = [
    "DEFAULT_JOB_TITLES",
    "EMAIL_RE",
    "FieldRecognizer",
    "PHONE_RE",
    "PROFILE_RE",
    "build_vocabulary",
    "default_recognizers",
    "recognize_email",
    "recognize_job_title",
    "recognize_phone",
    "recognize_website",
]
