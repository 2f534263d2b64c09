"""Logging setup, including share-token redaction for the access log."""
import logging
import re

ACCESS_LOGGER = "uvicorn.access"
REDACTED = "<redacted>"

_SHARE_PATH = re.compile(r"(/share/)[^/\s?#\"]+")


def redact_share_tokens(text: str) -> str:
    """Replace the token segment of any ``/share/<token>`` path."""
    return _SHARE_PATH.sub(rf"\g<1>{REDACTED}", text)


class ShareTokenRedactingFilter(logging.Filter):
    """Strips share tokens from request paths before a record is emitted.

    Uvicorn's access log passes the request path as a positional arg, so both
    ``record.args`` and ``record.msg`` are rewritten.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.args, tuple):
            record.args = tuple(
                redact_share_tokens(a) if isinstance(a, str) else a for a in record.args
            )
        if isinstance(record.msg, str):
            record.msg = redact_share_tokens(record.msg)
        return True


def install_access_log_redaction() -> None:
    """Attach the redacting filter to the access logger once."""
    access_logger = logging.getLogger(ACCESS_LOGGER)
    if not any(isinstance(f, ShareTokenRedactingFilter) for f in access_logger.filters):
        access_logger.addFilter(ShareTokenRedactingFilter())


def configure_logging(level: str) -> None:
    """Configure the root logger. Called once at startup."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    install_access_log_redaction()
