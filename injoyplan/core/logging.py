"""Logging configuration with consumer PII redaction."""
import logging
import sys
from injoyplan.services.redaction import RedactionService


class RedactionFilter(logging.Filter):
    """
    Masks emails, phone and document numbers before a record is emitted.

    Covers the message template, positional and mapping args, and the
    formatted traceback, since provider errors echo recipient addresses.
    """

    def __init__(self):
        super().__init__()
        self.redaction_service = RedactionService()

    def _redact(self, value):
        return self.redaction_service.redact_text(value) if isinstance(value, str) else value

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self._redact(record.msg)

        if isinstance(record.args, dict):
            record.args = {key: self._redact(value) for key, value in record.args.items()}
        elif record.args:
            record.args = tuple(self._redact(arg) for arg in record.args)

        # Formatter.format reuses exc_text when it is already set
        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = self._redact(record.exc_text)
        return True


def setup_logging(log_level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    # Add redaction filter to all handlers
    redaction_filter = RedactionFilter()
    for handler in logging.root.handlers:
        handler.addFilter(redaction_filter)

    # SQL echo carries bound parameters
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
