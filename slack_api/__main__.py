import json
import logging
import os
import sys

from argparse import ArgumentParser, Namespace
from getpass import getpass
from typing import Any, Optional

from blessings import Terminal  # type: ignore
import requests

from .client import (
    DEFAULT_API_URL,
    ClientConfig,
    SlackApiError,
    SlackClient,
    team_api_url,
)


class UsageError(Exception):
    """
    Exception raised if command line arguments cannot be interpreted.
    """

    pass


def parse_method_args(pairs: list[str]) -> dict[str, str]:
    """
    Parse `key=value` arguments for an API method.

    :raise UsageError: If an argument has no "="
    """
    args = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise UsageError(f"Invalid method argument '{pair}', expected key=value")
        args[key] = value
    return args


def read_token() -> Optional[str]:
    """
    Read the API token from the `SLACK_TOKEN` env var, or prompt for it.

    The prompt is only shown if stdin is a terminal.
    """
    token = os.environ.get("SLACK_TOKEN")
    if not token and sys.stdin.isatty():
        token = getpass("Slack API token: ")
    return token or None


def make_client(args: Namespace) -> SlackClient:
    """
    Create a client from command line options and environment variables.

    Options take precedence over the `SLACK_TOKEN`, `SLACK_TEAM` and
    `SLACK_WEBHOOK_URL` env vars.
    """
    token = args.token
    if not token and args.command == "request":
        token = read_token()

    team = args.team or os.environ.get("SLACK_TEAM")
    webhook_url = args.webhook_url or os.environ.get("SLACK_WEBHOOK_URL")

    config = ClientConfig(
        token=token,
        api_url=team_api_url(team) if team else DEFAULT_API_URL,
        webhook_url=webhook_url,
        timeout=args.timeout,
    )
    return SlackClient(config)


def read_payload(path: str) -> Any:
    """Read a JSON message payload from a file, or stdin if `path` is "-"."""
    if path == "-":
        return json.load(sys.stdin)
    with open(path) as fp:
        return json.load(fp)


def run_request(client: SlackClient, args: Namespace) -> int:
    method_args = parse_method_args(args.args)
    rsp = client.request(args.verb, args.method, method_args)
    print(json.dumps(rsp.data, indent=2, sort_keys=True))
    return 0


def run_send(client: SlackClient, args: Namespace, t: Terminal) -> int:
    if args.json and args.text:
        raise UsageError("Message text and --json cannot be combined")

    if args.json:
        try:
            message = read_payload(args.json)
        except (OSError, ValueError) as e:
            raise UsageError(f"Could not read message payload: {e}") from e
    elif args.text:
        message = args.text
    else:
        raise UsageError("Either message text or --json must be given")

    reply = client.send_message(message)
    if reply != "ok":
        print(f"{t.bold}Webhook replied:{t.normal} {reply}", file=sys.stderr)
        return 1

    print(reply)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = ArgumentParser(prog="slack-api")
    parser.add_argument("--token", help="API token (default: $SLACK_TOKEN)")
    parser.add_argument("--team", help="Team subdomain (default: $SLACK_TEAM)")
    parser.add_argument(
        "--webhook-url", help="Incoming webhook URL (default: $SLACK_WEBHOOK_URL)"
    )
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log requests to stderr"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    request_parser = subparsers.add_parser("request", help="Call a Web API method")
    request_parser.add_argument("verb", help="""HTTP method (eg. "GET", "POST")""")
    request_parser.add_argument(
        "method", help="""API method name (eg. "chat.postMessage")"""
    )
    request_parser.add_argument(
        "args", nargs="*", default=[], help="Method arguments as key=value pairs"
    )

    send_parser = subparsers.add_parser(
        "send", help="Send a message using an incoming webhook"
    )
    send_parser.add_argument("text", nargs="?", help="Message text")
    send_parser.add_argument(
        "--json", "-j", help="""Send a JSON message payload from a file ("-" for stdin)"""
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    t = Terminal()
    client = make_client(args)

    try:
        if args.command == "request":
            return run_request(client, args)
        else:
            return run_send(client, args, t)
    except UsageError as e:
        parser.error(str(e))
    except (SlackApiError, requests.RequestException) as e:
        print(f"{t.bold}Error:{t.normal} {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
