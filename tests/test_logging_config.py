import logging

from goods_issue.logging_config import PiiRedactionFilter, configure_logging, redact_pii


def test_redact_pii_masks_emails_and_credentials():
    message = redact_pii("login ana.rojas@example.com password=hunter2 Bearer abc.def")

    assert "ana.rojas@example.com" not in message
    assert "[REDACTED_EMAIL]" in message
    assert "hunter2" not in message
    assert "Bearer [REDACTED]" in message


def test_filter_redacts_interpolated_arguments():
    record = logging.LogRecord(
        "goods_issue", logging.INFO, __file__, 1, "Matched %s to %s", ("ana@example.com", "A100"), None
    )

    assert PiiRedactionFilter().filter(record) is True
    assert record.getMessage() == "Matched [REDACTED_EMAIL] to A100"


def test_configure_logging_installs_filter_once(app):
    handler = logging.StreamHandler()
    app.logger.addHandler(handler)
    try:
        configure_logging(app)
        configure_logging(app)
        assert sum(isinstance(f, PiiRedactionFilter) for f in handler.filters) == 1
    finally:
        app.logger.removeHandler(handler)
