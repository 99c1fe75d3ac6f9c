import dataclasses
import multiprocessing
import time

import pytest

from contact_extractor import extractor as ex
from contact_extractor.common import (
    ContactExtractor,
    ContactRecord,
    FieldRecognizer,
    ensure_contact_record,
    extract,
)
from contact_extractor.normalization import canonicalize_profile_url, normalize_text_key
from contact_extractor.recognizers import DEFAULT_JOB_TITLES, build_vocabulary

FORK_ONLY = pytest.mark.skipif(
    "fork" not in multiprocessing.get_all_start_methods(),
    reason="worker inherits unpicklable recognizers only under fork",
)

SAMPLE_CARD = "\n".join(
    [
        "Moustafa Ahmed",
        "Software Engineer",
        "moustafa@example.com",
        "+20-100-123-4567",
        "linkedin.com/in/moustafa",
    ]
)


def test_end_to_end_business_card():
    record = extract(SAMPLE_CARD)
    assert record.to_dict() == {
        "name": "",
        "email": "moustafa@example.com",
        "phone": "+201001234567",
        "jobTitle": "Software Engineer",
        "website": "https://linkedin.com/in/moustafa",
    }


def test_empty_text_yields_empty_record():
    record = extract("")
    assert record == ContactRecord()
    assert record.is_empty()
    assert extract(None).is_empty()


def test_non_string_input_is_rejected():
    with pytest.raises(TypeError):
        extract(12345)


def test_email_first_match_preserves_case():
    assert extract("contact me at jane.doe@example.com please").email == "jane.doe@example.com"
    text = "Primary: Jane_Doe-1@Mail.Example.ORG, backup: other@example.com"
    assert extract(text).email == "Jane_Doe-1@Mail.Example.ORG"


def test_no_email_shaped_text_leaves_email_empty():
    for text in ["no contact here", "user at example dot com", "@handle only", "a@b"]:
        assert extract(text).email == ""


def test_email_local_part_is_bounded():
    assert extract("a" * 65 + "@example.com").email == ""
    assert extract("a" * 64 + "@example.com").email == "a" * 64 + "@example.com"


def test_phone_strips_hyphens_and_spaces():
    assert extract("Phone: +20-100-123-4567 (mobile)").phone == "+201001234567"
    assert extract("call 0020 100 123 4567 today").phone == "00201001234567"


def test_phone_keeps_parentheses_and_dots():
    assert extract("Tel: +1 (415) 555-2671").phone == "+1(415)5552671"
    assert extract("office 415.555.2671").phone == "415.555.2671"


def test_short_digit_runs_are_not_phones():
    assert extract("Class of 2019, room 42").phone == ""


def test_digits_inside_email_are_not_phones():
    record = extract("call 020 1234 5678, mail bob.5551234567@x.com")
    assert record.phone == "02012345678"
    assert record.email == "bob.5551234567@x.com"
    assert extract("mail bob.5551234567@x.com only").phone == ""


@pytest.mark.parametrize(
    "text",
    [
        "profile: linkedin.com/in/moustafa",
        "LinkedIn.com/in/Moustafa",
        "see HTTP://WWW.LINKEDIN.COM/IN/MOUSTAFA for more",
        "http://linkedin.com/in/moustafa/",
    ],
)
def test_linkedin_profile_is_canonicalized(text):
    assert extract(text).website == "https://linkedin.com/in/moustafa"


@pytest.mark.parametrize(
    "raw",
    [
        "HTTPS://www.LinkedIn.com/in/Jane-Roe/",
        "http://linkedin.com/in/jane-roe",
        "www.linkedin.com/in/JANE-ROE//",
        "  linkedin.com/in/jane-roe  ",
        "https://linkedin.com/in/jane-roe",
    ],
)
def test_canonicalize_profile_url_accepts_full_urls(raw):
    canonical = canonicalize_profile_url(raw)
    assert canonical == "https://linkedin.com/in/jane-roe"
    assert canonicalize_profile_url(canonical) == canonical


def test_canonicalize_profile_url_blank():
    assert canonicalize_profile_url("") == ""
    assert canonicalize_profile_url("   ") == ""


def test_other_urls_are_not_websites():
    assert extract("https://github.com/moustafa and https://example.com").website == ""
    assert extract("linkedin.com/company/acme").website == ""


def test_job_title_vocabulary_order_wins():
    text = "Developer for years, now a Software Engineer"
    assert extract(text).job_title == "Software Engineer"


def test_job_title_returns_vocabulary_spelling():
    assert extract("senior SOFTWARE ENGINEER at Acme").job_title == "Software Engineer"
    assert extract("freelance developer").job_title == "Developer"
    assert extract("gardener").job_title == ""


def test_custom_job_title_vocabulary():
    extractor = ContactExtractor(job_titles=["Data Scientist", "Engineer"])
    assert extractor.extract("Data Engineer turned Data Scientist").job_title == "Data Scientist"
    assert extractor.extract("Software Developer").job_title == ""


def test_build_vocabulary_dedupes_and_keeps_order():
    assert build_vocabulary(None) == DEFAULT_JOB_TITLES
    assert build_vocabulary(["Engineer", " engineer ", "", "CTO"]) == ("Engineer", "CTO")
    assert build_vocabulary([]) == ()
    assert build_vocabulary(["UI/UX  Designer", "ui/ux designer"]) == ("UI/UX  Designer",)
    assert normalize_text_key("  Full\tStack   DEVELOPER ") == "full stack developer"


def test_name_is_never_populated():
    assert extract(SAMPLE_CARD).name == ""


@pytest.mark.parametrize(
    "text",
    [
        SAMPLE_CARD,
        "Jane Roe\nProduct Manager\nJane.Roe@Example.com\nTel: +1 (415) 555-2671",
        "office 415.555.2671 / www.LinkedIn.com/in/Jane-Roe",
        "call 020 1234 5678, mail bob.5551234567@x.com",
        "",
    ],
)
def test_re_extracting_own_values_is_stable(text):
    first = extract(text)
    rebuilt = "\n".join(value for value in first.to_dict().values() if value)
    assert extract(rebuilt) == first


def test_pathological_inputs_complete():
    assert extract("a." * 50000 + "@").email == ""
    assert extract("x" * 200000).is_empty()
    assert extract("9" * 50000).phone.startswith("9")


def test_record_is_immutable():
    record = extract(SAMPLE_CARD)
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.email = "other@example.com"
    changed = record.replace(email="other@example.com")
    assert record.email == "moustafa@example.com"
    assert changed.email == "other@example.com"


def test_record_mapping_round_trip_accepts_both_key_styles():
    record = ContactRecord.from_mapping({"jobTitle": " CEO ", "email": None, "phone": "123"})
    assert record == ContactRecord(job_title="CEO", phone="123")
    assert ContactRecord.from_mapping({"job_title": "CEO"}).job_title == "CEO"
    assert ensure_contact_record(record.to_dict()) == record
    assert ensure_contact_record(None) == ContactRecord()
    with pytest.raises(TypeError):
        ensure_contact_record(["not", "a", "record"])


def test_additional_recognizer_extends_pipeline():
    def first_line(text):
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        return lines[0] if lines else None

    extended = ContactExtractor().with_recognizer(FieldRecognizer("name", first_line))
    record = extended.extract(SAMPLE_CARD)
    assert record.name == "Moustafa Ahmed"
    assert record.email == "moustafa@example.com"


def test_registry_rejects_bad_configuration():
    recognizers = ContactExtractor().recognizers
    with pytest.raises(ValueError):
        ContactExtractor(recognizers=recognizers + (FieldRecognizer("email", lambda t: None),))
    with pytest.raises(ValueError):
        ContactExtractor(recognizers=(FieldRecognizer("address", lambda t: None),))
    with pytest.raises(ValueError):
        ContactExtractor(recognizers=recognizers, job_titles=["CEO"])


class _InlineResult:
    def __init__(self, func, args):
        self._func = func
        self._args = args

    def get(self, timeout=None):
        return self._func(*self._args)


class _StuckResult:
    def get(self, timeout=None):
        raise multiprocessing.TimeoutError()


class _FakePool:
    def __init__(self, result_cls, extractor):
        self.result_cls = result_cls
        self.extractor = extractor
        self.terminated = False

    def apply_async(self, func, args):
        if self.result_cls is _StuckResult:
            return _StuckResult()
        return _InlineResult(self.extractor.extract, args)

    def terminate(self):
        self.terminated = True

    def join(self):
        pass


def test_extract_with_timeout_runs_inline_without_timeout(monkeypatch):
    def fail_pool(extractor):
        raise AssertionError("pool should not be used")

    monkeypatch.setattr(ex, "_open_pool", fail_pool)
    assert ex.extract_with_timeout(SAMPLE_CARD, None) == extract(SAMPLE_CARD)
    assert ex.extract_with_timeout(SAMPLE_CARD, 0) == extract(SAMPLE_CARD)


def test_extract_with_timeout_uses_worker(monkeypatch):
    pools = []

    def open_pool(extractor):
        pools.append(_FakePool(_InlineResult, extractor))
        return pools[-1]

    monkeypatch.setattr(ex, "_open_pool", open_pool)
    assert ex.extract_with_timeout(SAMPLE_CARD, 5) == extract(SAMPLE_CARD)
    assert len(pools) == 1
    assert pools[0].terminated


def test_extract_with_timeout_falls_back_to_empty_record(monkeypatch, caplog):
    monkeypatch.setattr(ex, "_open_pool", lambda extractor: _FakePool(_StuckResult, extractor))
    with caplog.at_level("WARNING"):
        record = ex.extract_with_timeout(SAMPLE_CARD, 0.01)
    assert record.is_empty()
    assert "returning empty record" in caplog.text


def test_worker_reopens_pool_only_after_a_timeout(monkeypatch):
    results = [_StuckResult, _InlineResult, _InlineResult]
    pools = []

    def open_pool(extractor):
        pools.append(_FakePool(results[len(pools)], extractor))
        return pools[-1]

    monkeypatch.setattr(ex, "_open_pool", open_pool)
    with ex.ExtractionWorker(None, 1.0) as worker:
        assert worker.extract(SAMPLE_CARD).is_empty()
        assert worker.extract(SAMPLE_CARD) == extract(SAMPLE_CARD)
        assert worker.extract("jane@example.com").email == "jane@example.com"
    assert len(pools) == 2
    assert all(pool.terminated for pool in pools)


def test_extract_with_timeout_in_real_worker_process():
    assert ex.extract_with_timeout(SAMPLE_CARD, 30) == extract(SAMPLE_CARD)


@FORK_ONLY
def test_real_worker_runs_locally_defined_recognizers():
    def first_line(text):
        return text.splitlines()[0].strip() if text else None

    name_recognizer = FieldRecognizer("name", lambda t: first_line(t))
    extended = ContactExtractor().with_recognizer(name_recognizer)
    record = ex.extract_with_timeout(SAMPLE_CARD, 30, extended)
    assert record.name == "Moustafa Ahmed"
    assert record.website == "https://linkedin.com/in/moustafa"


@FORK_ONLY
def test_real_worker_recovers_after_timeout(caplog):
    def sleepy_title(text):
        if "slow" in text:
            time.sleep(30)
        return None

    recognizers = ContactExtractor().recognizers[:-1]
    slow = ContactExtractor(recognizers=recognizers + (FieldRecognizer("job_title", sleepy_title),))
    with ex.ExtractionWorker(slow, 0.5) as worker:
        with caplog.at_level("WARNING"):
            assert worker.extract("slow jane@example.com").is_empty()
        assert "returning empty record" in caplog.text
        assert worker.extract("jane@example.com").email == "jane@example.com"


if __name__ == "__main__":
    pytest.main(["-q"])
