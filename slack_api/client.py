from dataclasses import dataclass, replace
import json
import logging
from typing import Any, Mapping, Optional, Self, Union

import requests

from .response import SlackResponse, summarize_html

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://slack.com/api/"


class SlackApiError(RuntimeError):
    """
    Base class for errors raised by `SlackClient`.
    """

    pass


class ConfigurationError(SlackApiError):
    """
    Exception raised if an operation is attempted without the credential it needs.
    """

    pass


class MalformedResponseError(SlackApiError):
    """
    Exception raised if the Web API returns a body that is not a JSON object.
    """

    def __init__(self, message: str, body: str) -> None:
        super().__init__(message)
        self.body = body


class ApiError(SlackApiError):
    """
    Exception raised if the Web API reports an error.

    The message is the error code reported by Slack, eg. "channel_not_found".
    See https://api.slack.com/web#evaluating_responses.
    """

    def __init__(self, response: SlackResponse) -> None:
        super().__init__(response.error)
        self.response = response

    @property
    def error(self) -> Optional[str]:
        return self.response.error


@dataclass(frozen=True)
class ClientConfig:
    token: Optional[str] = None
    """Bearer token used to authenticate Web API requests."""

    api_url: str = DEFAULT_API_URL
    """Base URL that Web API method names are appended to."""

    webhook_url: Optional[str] = None
    """Incoming webhook URL used by `SlackClient.send_message`."""

    timeout: Optional[float] = None
    """Request timeout in seconds. `None` uses the transport's default."""


def team_api_url(team: str) -> str:
    """Return the Web API base URL for a team (workspace) subdomain."""
    return f"https://{team}.slack.com/api/"


class SlackClient:
    """
    Client for Slack's Web API and incoming webhooks.

    A client has up to two credentials: a token for Web API calls made with
    `request` and a webhook URL for messages sent with `send_message`. Each is
    only checked when the operation that needs it is used.

    Clients are immutable. The `set_*` methods return a new client, so they
    can be chained, and never affect requests made using the original.

    See https://api.slack.com/web and https://api.slack.com/messaging/webhooks.
    """

    def __init__(self, config: Optional[ClientConfig] = None) -> None:
        self.config = config or ClientConfig()

    @classmethod
    def with_token(
        cls,
        token: str,
        team: Optional[str] = None,
        webhook_url: Optional[str] = None,
    ) -> Self:
        """
        Create a client for making Web API requests.

        :param token: Bot or user token (eg. "xoxb-...")
        :param team: Team subdomain. If set, requests are sent to `https://{team}.slack.com/api/`
        :param webhook_url: Optional incoming webhook URL for `send_message`
        """
        client = cls(ClientConfig(token=token, webhook_url=webhook_url))
        if team:
            client = client.set_team(team)
        return client

    @classmethod
    def with_webhook(cls, webhook_url: str) -> Self:
        """
        Create a client for sending messages to an incoming webhook.

        :param webhook_url: Webhook URL, eg. "https://hooks.slack.com/services/..."
        """
        return cls(ClientConfig(webhook_url=webhook_url))

    def set_token(self, token: str) -> Self:
        return self._replace(token=token)

    def set_team(self, team: str) -> Self:
        """
        Return a client which sends Web API requests to a team's subdomain.
        """
        return self._replace(api_url=team_api_url(team))

    def set_webhook_url(self, webhook_url: str) -> Self:
        return self._replace(webhook_url=webhook_url)

    def _replace(self, **changes: Any) -> Self:
        return type(self)(replace(self.config, **changes))

    def request(
        self,
        verb: str,
        method: str,
        args: Optional[Mapping[str, Any]] = None,
    ) -> SlackResponse:
        """
        Call a Web API method.

        :param verb: HTTP method, case-insensitive (it is upper-cased before
            sending, so "get" is sent as `GET`). `GET` sends `args` in the
            query string and `POST` sends them as a form-encoded body. Other
            verbs are sent without `args`.
        :param method: API method name, eg. "chat.postMessage"
        :param args: Method arguments
        :raise ConfigurationError: If the client has no token
        :raise MalformedResponseError: If the response is not a JSON object
        :raise ApiError: If Slack reported an error
        """
        token = self.config.token
        if not token:
            raise ConfigurationError(
                "Cannot execute Slack API request with no API token defined."
            )

        verb = verb.upper()
        url = self.config.api_url + method
        args = dict(args or {})
        headers = {"Authorization": f"Bearer {token}"}

        kwargs: dict[str, Any] = {"headers": headers, "timeout": self.config.timeout}
        if verb == "GET":
            if args:
                kwargs["params"] = args
        elif verb == "POST":
            kwargs["data"] = args

        logger.debug("Calling Slack API: %s %s", verb, url)
        rsp = requests.request(verb, url, **kwargs)
        body = parse_response(rsp)
        if body.error:
            logger.warning("Slack API %s returned error: %s", method, body.error)
            raise ApiError(body)
        rsp.raise_for_status()
        return body

    def send_message(self, data: Union[str, Mapping[str, Any]]) -> str:
        """
        Send a message using the client's incoming webhook.

        The webhook's reply is returned rather than checked. Slack replies
        with "ok" if the message was accepted, or an error message such as
        "invalid_payload" otherwise.

        :param data: Message text using Slack's "mrkdwn" format, or a full
            message payload (eg. with "blocks" or "attachments")
        :raise ConfigurationError: If the client has no webhook URL
        """
        webhook_url = self.config.webhook_url
        if not webhook_url:
            raise ConfigurationError(
                "Cannot send message via webhook with no webhook defined."
            )

        if isinstance(data, str):
            message: Any = {"text": data}
        else:
            message = data

        logger.debug("Sending message to Slack webhook")
        rsp = requests.post(
            webhook_url,
            data=json.dumps(message),
            headers={"Content-Type": "application/json"},
            timeout=self.config.timeout,
        )
        return rsp.text


def parse_response(rsp: requests.Response) -> SlackResponse:
    """
    Decode the body of a Web API response.

    :raise MalformedResponseError: If the body is not a JSON object
    """
    try:
        body = rsp.json()
    except ValueError as exc:
        text = rsp.text
        summary = summarize_html(text)
        message = "API response was not valid JSON"
        if summary:
            message = f"{message} (HTTP {rsp.status_code}: {summary})"
        logger.warning("Malformed Slack API response (HTTP %s)", rsp.status_code)
        raise MalformedResponseError(message, text) from exc

    if not isinstance(body, dict):
        logger.warning("Malformed Slack API response (HTTP %s)", rsp.status_code)
        raise MalformedResponseError(
            f"API response was not a JSON object (got {type(body).__name__})",
            rsp.text,
        )

    return SlackResponse(body)
