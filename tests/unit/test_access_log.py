"""
Unit tests for the access log.
"""

import json
import logging
import re

from fileserver.access_log import AccessLogger, AccessLogEntry


def make_entry(**overrides) -> AccessLogEntry:
    fields = dict(
        connection_id="a1b2c3d4",
        method="GET",
        path="/greeting.txt",
        client_ip="127.0.0.1",
        status_code=200,
        content_length=2,
        duration_ms=0.4123,
        timestamp="19/Oct/2026:10:55:36 +0000",
    )
    fields.update(overrides)
    return AccessLogEntry(**fields)


class TestAccessLogEntry:

    def test_to_text(self):
        assert make_entry().to_text() == (
            '127.0.0.1 - - [19/Oct/2026:10:55:36 +0000] '
            '"GET /greeting.txt" 200 2 0.41ms'
        )

    def test_to_dict_rounds_duration(self):
        data = make_entry().to_dict()
        assert data["duration_ms"] == 0.41
        assert data["status_code"] == 200
        assert data["path"] == "/greeting.txt"


class TestAccessLogger:

    def test_text_format(self, caplog):
        with caplog.at_level(logging.INFO, logger="fileserver.access"):
            AccessLogger().log(make_entry(status_code=404, content_length=13))

        assert len(caplog.records) == 1
        assert caplog.records[0].name == "fileserver.access"
        assert '"GET /greeting.txt" 404 13' in caplog.records[0].getMessage()

    def test_json_format(self, caplog):
        with caplog.at_level(logging.INFO, logger="fileserver.access"):
            AccessLogger(log_format="json").log(make_entry())

        data = json.loads(caplog.records[0].getMessage())
        assert data["connection_id"] == "a1b2c3d4"
        assert data["content_length"] == 2

    def test_log_level(self, caplog):
        with caplog.at_level(logging.INFO, logger="fileserver.access"):
            AccessLogger(log_level=logging.DEBUG).log(make_entry())

        assert caplog.records == []

    def test_timestamp_format(self):
        assert re.match(r"^\d{2}/\w{3}/\d{4}:\d{2}:\d{2}:\d{2} [+-]\d{4}$", AccessLogger.now())
