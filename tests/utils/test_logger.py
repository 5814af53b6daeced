from review_pulse.utils.logger import (
    add_analysis_context,
    add_endpoint_context,
    get_logger,
    redact_secrets,
)


def test_tokens_are_masked():
    event = {"event": "API token saved", "auth_token": "hf_secret", "path": "/tmp/token"}

    redacted = redact_secrets(None, "info", event)

    assert redacted["auth_token"] == "***"
    assert redacted["path"] == "/tmp/token"


def test_empty_token_fields_are_left_alone():
    assert redact_secrets(None, "info", {"token": None})["token"] is None


def test_analysis_context():
    assert add_analysis_context("abc") == {"analysis_id": "abc"}
    assert add_analysis_context("abc", 42) == {"analysis_id": "abc", "review_length": 42}


def test_endpoint_context():
    assert add_endpoint_context(1, "relay") == {"endpoint_index": 1, "endpoint_kind": "relay"}


def test_get_logger_accepts_fields():
    get_logger(__name__).info("Logger smoke test", **add_endpoint_context(0, "direct"))
