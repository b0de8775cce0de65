import logging

from docare.core.logging_config import REDACTED, SensitiveDataFilter, redact
from docare.middleware import determine_action, extract_resource

APPT_ID = "2f1b7c1e-8d4a-4b8e-9c3f-0a1b2c3d4e5f"


def test_determine_action_prefers_path_markers():
    assert determine_action("POST", "/api/v1/auth/login") == "LOGIN"
    assert determine_action("POST", "/api/v1/auth/signup") == "SIGNUP"
    assert determine_action("POST", "/api/v1/auth/refresh") == "REFRESH_TOKEN"
    assert determine_action("POST", "/api/v1/auth/logout") == "LOGOUT"


def test_determine_action_falls_back_to_method():
    assert determine_action("GET", "/api/v1/appointments") == "VIEW"
    assert determine_action("PATCH", "/api/v1/users/me") == "UPDATE"
    assert determine_action("DELETE", f"/api/v1/devices/{APPT_ID}") == "DELETE"
    assert determine_action("HEAD", "/api/v1/users") == "UNKNOWN"


def test_extract_resource():
    assert extract_resource(f"/api/v1/appointments/{APPT_ID}") == ("appointments", APPT_ID)
    assert extract_resource("/api/v1/users/me") == ("users", None)
    assert extract_resource("/api/v1") == (None, None)


def test_redact_nested_structures():
    data = {"email": "a@example.com", "password": "hunter2", "nested": [{"access_token": "abc"}]}
    assert redact(data) == {"email": "a@example.com", "password": REDACTED, "nested": [{"access_token": REDACTED}]}


def test_redact_inline_strings():
    assert "hunter2" not in redact("login failed password=hunter2 for user")
    assert "abc.def" not in redact('{"refresh_token": "abc.def"}')
    assert redact("nothing secret here") == "nothing secret here"


def test_filter_scrubs_log_records():
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "payload %s", ({"secret": "x"},), None)
    assert SensitiveDataFilter().filter(record) is True
    assert record.getMessage() == f"payload {{'secret': '{REDACTED}'}}"
