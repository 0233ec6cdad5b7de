import json
import logging

from smart_quote.logging_config import StructuredFormatter, get_request_id, set_request_id


def _record(**extra):
    record = logging.LogRecord("smart_quote.freight", logging.INFO, __file__, 10, "Estimated freight", (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_extra_fields_and_request_id_are_emitted():
    set_request_id("req-123")

    payload = json.loads(StructuredFormatter().format(_record(distance_km=50.0, sender_cep="01310-100")))

    assert get_request_id() == "req-123"
    assert payload["severity"] == "INFO"
    assert payload["message"] == "Estimated freight"
    assert payload["request_id"] == "req-123"
    assert payload["distance_km"] == 50.0
    assert payload["sender_cep"] == "01310-100"
    assert "args" not in payload
