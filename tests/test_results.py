import json

from wordpress_mcp.credentials import IncompleteCredentials
from wordpress_mcp.exceptions import BackendError, UnknownToolError
from wordpress_mcp.results import error_result, success_result


def test_success_is_pretty_printed_json():
    payload = {"id": 1, "title": "Héllo", "tags": [7]}
    result = success_result(payload)

    assert result.is_error is False
    assert result.text == json.dumps(payload, indent=2, ensure_ascii=False)
    assert json.loads(result.text) == payload


def test_backend_error_keeps_status_and_body():
    result = error_result(BackendError(403, '{"code":"rest_forbidden"}'))

    assert result.is_error is True
    assert result.text == 'Error: WordPress API Error (403): {"code":"rest_forbidden"}'


def test_unknown_tool_message():
    assert error_result(UnknownToolError("wp_nope")).text == "Error: Unknown tool: wp_nope"


def test_incomplete_credentials_message_is_verbatim():
    result = error_result(IncompleteCredentials(missing=("WORDPRESS_URL",)))

    assert result.is_error is True
    assert result.text == "Error: WORDPRESS_URL, WORDPRESS_USERNAME, and WORDPRESS_APP_PASSWORD are required."


def test_wire_form():
    assert success_result([]).dump() == {"content": [{"type": "text", "text": "[]"}], "isError": False}
