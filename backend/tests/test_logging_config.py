import logging

from cloudshare.logging_config import (
    ACCESS_LOGGER,
    ShareTokenRedactingFilter,
    install_access_log_redaction,
    redact_share_tokens,
)
from cloudshare.main import create_app

SECRET_TOKEN = "s3cr3tT0kenAbCdEfGhIjKlMnOpQrSt"


def _log_access(path: str) -> None:
    # Same call shape as uvicorn's access logger
    logging.getLogger(ACCESS_LOGGER).info(
        '%s - "%s %s HTTP/%s" %d', "127.0.0.1:5000", "GET", path, "1.1", 200
    )


class TestRedactShareTokens:

    def test_token_segment_replaced(self):
        assert redact_share_tokens(f"/api/share/{SECRET_TOKEN}") == "/api/share/<redacted>"

    def test_download_path_keeps_suffix(self):
        redacted = redact_share_tokens(f"/api/share/{SECRET_TOKEN}/download?x=1")

        assert redacted == "/api/share/<redacted>/download?x=1"

    def test_other_paths_untouched(self):
        assert redact_share_tokens("/api/files/123/share") == "/api/files/123/share"


class TestAccessLogRedaction:

    async def test_app_factory_redacts_share_tokens_from_access_log(self, settings, services, caplog):
        create_app(settings, services=services)

        with caplog.at_level(logging.INFO, logger=ACCESS_LOGGER):
            _log_access(f"/api/share/{SECRET_TOKEN}/download")

        assert SECRET_TOKEN not in caplog.text
        assert "/api/share/<redacted>/download" in caplog.text

    def test_non_share_requests_logged_verbatim(self, caplog):
        install_access_log_redaction()

        with caplog.at_level(logging.INFO, logger=ACCESS_LOGGER):
            _log_access("/api/files/stats")

        assert "/api/files/stats" in caplog.text

    def test_filter_installed_once(self):
        install_access_log_redaction()
        install_access_log_redaction()

        filters = logging.getLogger(ACCESS_LOGGER).filters
        assert sum(isinstance(f, ShareTokenRedactingFilter) for f in filters) == 1
