from .client import (
    ApiError,
    ClientConfig,
    ConfigurationError,
    MalformedResponseError,
    SlackApiError,
    SlackClient,
)
from .response import SlackResponse

__all__ = [
    "ApiError",
    "ClientConfig",
    "ConfigurationError",
    "MalformedResponseError",
    "SlackApiError",
    "SlackClient",
    "SlackResponse",
]
