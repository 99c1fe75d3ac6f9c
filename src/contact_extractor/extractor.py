from __future__ import annotations

import logging
import multiprocessing
import pickle
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from .config_loader import ExtractorConfig
from .models import ContactRecord
from .recognizers import FieldRecognizer, default_recognizers

logger = logging.getLogger(__name__)


def _validate_registry(recognizers: Iterable[FieldRecognizer]) -> Tuple[FieldRecognizer, ...]:
    allowed = set(ContactRecord.attribute_names())
    seen = set()
    ordered = tuple(recognizers)
    for recognizer in ordered:
        if recognizer.field not in allowed:
            raise ValueError(f"Recognizer targets unknown field: {recognizer.field!r}")
        if recognizer.field in seen:
            raise ValueError(f"More than one recognizer registered for field {recognizer.field!r}")
        seen.add(recognizer.field)
    return ordered


class ContactExtractor:
    """
    Runs an ordered set of independent field recognizers over free text.

    Every recognizer sees the full, unmodified input; none depends on another's
    result. Fields without a match stay empty, so an empty or unrelated text
    simply yields an empty ``ContactRecord``.
    """

    def __init__(
        self,
        recognizers: Optional[Sequence[FieldRecognizer]] = None,
        job_titles: Optional[Iterable[str]] = None,
    ):
        if recognizers is not None and job_titles is not None:
            raise ValueError("Pass either recognizers or job_titles, not both")
        if recognizers is None:
            recognizers = default_recognizers(job_titles)
        self.recognizers = _validate_registry(recognizers)

    @classmethod
    def from_config(cls, config: ExtractorConfig) -> "ContactExtractor":
        return cls(job_titles=config.recognition.job_titles)

    def with_recognizer(self, recognizer: FieldRecognizer) -> "ContactExtractor":
        return ContactExtractor(recognizers=self.recognizers + (recognizer,))

    def extract(self, text: Optional[str]) -> ContactRecord:
        if text is None:
            text = ""
        if not isinstance(text, str):
            raise TypeError(f"extract() expects a string, got {type(text).__name__}")
        values: Dict[str, Any] = {}
        for recognizer in self.recognizers:
            value = recognizer(text)
            if value:
                values[recognizer.field] = value
            else:
                logger.debug("No %s recognized", recognizer.field)
        return ContactRecord(**values)


_DEFAULT_EXTRACTOR = ContactExtractor()


def extract(text: Optional[str]) -> ContactRecord:
    return _DEFAULT_EXTRACTOR.extract(text)


# set in each worker process by the pool initializer
_WORKER_EXTRACTOR: Optional[ContactExtractor] = None


def _install_worker_extractor(extractor: ContactExtractor) -> None:
    global _WORKER_EXTRACTOR
    _WORKER_EXTRACTOR = extractor


def _extract_in_worker(text: Optional[str]) -> ContactRecord:
    return (_WORKER_EXTRACTOR or _DEFAULT_EXTRACTOR).extract(text)


def _open_pool(extractor: ContactExtractor):
    # a forked worker inherits the extractor, so lambdas and local recognizers work
    if "fork" in multiprocessing.get_all_start_methods():
        context = multiprocessing.get_context("fork")
    else:
        try:
            pickle.dumps(extractor)
        except (pickle.PicklingError, AttributeError, TypeError) as exc:
            raise ValueError(
                "Recognizers must be importable module-level callables to run with a timeout "
                "on this platform"
            ) from exc
        context = multiprocessing.get_context()
    return context.Pool(
        processes=1, initializer=_install_worker_extractor, initargs=(extractor,)
    )


class ExtractionWorker:
    """
    Runs extractions in one reusable worker process, each bounded by ``timeout_seconds``.

    A text that overruns the timeout gets an all-empty record so the caller can
    fall back to manual entry; the stuck worker is terminated and a fresh one is
    started on the next call. A missing or non-positive timeout runs inline.
    """

    def __init__(self, extractor: Optional[ContactExtractor], timeout_seconds: Optional[float]):
        self.extractor = extractor or _DEFAULT_EXTRACTOR
        self.timeout_seconds = timeout_seconds if timeout_seconds and timeout_seconds > 0 else None
        self._pool = None

    def __enter__(self) -> "ExtractionWorker":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._pool is not None:
            self._pool.terminate()
            self._pool.join()
            self._pool = None

    def extract(self, text: Optional[str]) -> ContactRecord:
        if self.timeout_seconds is None:
            return self.extractor.extract(text)
        if self._pool is None:
            self._pool = _open_pool(self.extractor)
        pending = self._pool.apply_async(_extract_in_worker, (text,))
        try:
            return pending.get(timeout=self.timeout_seconds)
        except multiprocessing.TimeoutError:
            logger.warning(
                "Contact extraction exceeded %.2fs on %d characters; returning empty record",
                self.timeout_seconds,
                len(text or ""),
            )
            self.close()
            return ContactRecord()


def extract_with_timeout(
    text: Optional[str],
    timeout_seconds: Optional[float],
    extractor: Optional[ContactExtractor] = None,
) -> ContactRecord:
    """One-off bounded extraction; batch callers should hold an ``ExtractionWorker`` instead."""
    with ExtractionWorker(extractor, timeout_seconds) as worker:
        return worker.extract(text)
