import pytest

from slack_api.response import SlackResponse, summarize_html


class TestSlackResponse:
    def test_mapping_access(self):
        rsp = SlackResponse({"ok": True, "channel": "C1"})

        assert rsp["channel"] == "C1"
        assert rsp.get("ts") is None
        assert "channel" in rsp
        assert dict(rsp) == {"ok": True, "channel": "C1"}
        assert len(rsp) == 2

    def test_error(self):
        rsp = SlackResponse({"ok": False, "error": "not_authed"})

        assert rsp.error == "not_authed"
        assert not rsp.ok

    def test_missing_error(self):
        rsp = SlackResponse({"ok": True})

        assert rsp.error is None
        assert rsp.ok

    @pytest.mark.parametrize(
        "data,ok",
        [
            ({}, True),
            ({"error": "invalid_auth"}, False),
            ({"ok": False}, False),
        ],
    )
    def test_ok_without_ok_field(self, data, ok):
        assert SlackResponse(data).ok is ok


class TestSummarizeHTML:
    def test_it_uses_title(self):
        body = """
        <html>
          <head><title>503   Service
            Unavailable</title></head>
          <body><h1>Sorry</h1></body>
        </html>
        """

        assert summarize_html(body) == "503 Service Unavailable"

    def test_it_falls_back_to_text(self):
        body = "<html><body><h1>Bad Gateway</h1><p>Try again later.</p></body></html>"

        assert summarize_html(body) == "Bad Gateway Try again later."

    def test_it_truncates(self):
        body = f"<p>{'x' * 50}</p>"

        summary = summarize_html(body, max_length=10)

        assert summary == "x" * 9 + "…"

    @pytest.mark.parametrize("body", ["", "upstream connect error", "a < b > c", "<p> </p>"])
    def test_it_returns_none_for_non_html(self, body):
        assert summarize_html(body) is None


class TestSlackResponseEquality:
    def test_it_equals_decoded_json(self):
        rsp = SlackResponse({"ok": True, "channel": "C1"})

        assert rsp == {"ok": True, "channel": "C1"}
        assert rsp == SlackResponse({"ok": True, "channel": "C1"})
        assert rsp != {"ok": False}

    def test_it_is_unhashable(self):
        rsp = SlackResponse({"ok": True})

        with pytest.raises(TypeError, match="SlackResponse"):
            hash(rsp)
