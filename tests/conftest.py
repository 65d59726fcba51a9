import json
from typing import Any, Union
from unittest import mock

import pytest
import requests


def make_response(body: Union[str, Any], status_code: int = 200) -> requests.Response:
    """
    Create a canned `requests.Response`.

    :param body: Body text, or a value to JSON-encode
    """
    if not isinstance(body, str):
        body = json.dumps(body)
    rsp = requests.Response()
    rsp.status_code = status_code
    rsp._content = body.encode("utf-8")
    rsp.encoding = "utf-8"
    return rsp


@pytest.fixture
def send():
    """
    Replace the transport with a mock.

    Requests are still prepared by `requests`, so the `PreparedRequest`
    passed to the mock reflects what would be sent over the wire.
    """
    with mock.patch.object(requests.Session, "send", autospec=True) as send:
        send.return_value = make_response({"ok": True})
        yield send


def sent_request(send) -> requests.PreparedRequest:
    """Return the request passed to the most recent call of the `send` mock."""
    return send.call_args.args[1]
