"""Tests for the structured log formatter."""

import json
import logging

from tenantscope.utils.logging import JSONFormatter


def test_json_formatter_includes_tenant_extras() -> None:
    record = logging.LogRecord("tenantscope", logging.WARNING, __file__, 1, "SECURITY EVENT: x", None, None)
    record.tenant_id = "7"
    record.event_type = "tenant_id_override"

    data = json.loads(JSONFormatter().format(record))
    assert data["tenant_id"] == "7"
    assert data["event_type"] == "tenant_id_override"
    assert data["message"] == "SECURITY EVENT: x"
    assert "user_id" not in data
