from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Optional

from bs4 import BeautifulSoup


@dataclass(frozen=True, eq=False)
class SlackResponse(Mapping[str, Any]):
    """
    Decoded JSON object returned by a Slack Web API method.

    The response is read-only and supports mapping-style access to fields
    that are specific to the called method, eg. `rsp["channel"]`.
    """

    data: dict[str, Any] = field(default_factory=dict)
    """The decoded JSON object, as returned by Slack."""

    @property
    def error(self) -> Optional[str]:
        """
        Error code reported by Slack (eg. "channel_not_found").

        This is `None` if the `error` field is missing or falsy.
        """
        error = self.data.get("error")
        if not error:
            return None
        return str(error)

    @property
    def ok(self) -> bool:
        """
        Whether the call succeeded.

        Slack sets `ok` on every Web API response. If it is missing, the
        response is considered successful unless it reports an error.
        """
        if "ok" in self.data:
            return bool(self.data["ok"])
        return self.error is None

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)


def summarize_html(body: str, max_length: int = 200) -> Optional[str]:
    """
    Extract a short, single-line summary from an HTML error page.

    Proxies and load balancers in front of the API return HTML rather than
    JSON when they fail. The page title is preferred, falling back to the
    visible text.

    :param body: Response body
    :param max_length: Maximum length of the returned summary
    :return: Summary text, or `None` if `body` does not look like HTML
    """
    if "<" not in body or ">" not in body:
        return None

    soup = BeautifulSoup(body, "html.parser")
    if not soup.find():
        return None

    if soup.title and soup.title.get_text().strip():
        text = soup.title.get_text()
    else:
        text = soup.get_text(" ")

    summary = " ".join(text.split())
    if not summary:
        return None
    if len(summary) > max_length:
        summary = summary[: max_length - 1] + "…"
    return summary
