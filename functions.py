"""Command-line entry point for the webhook functions.

Runs a handler locally with a synthesized trigger event and prints the
response body. The watch renewal commands are what the scheduler calls.

Usage:
  # Re-register push notifications (run at least every 7 days)
  python functions.py renew-calendar-watch
  python functions.py renew-gmail-watch --stop-existing

  # Inspect recent events for a calendar notification
  python functions.py fetch-events --resource-id abc123

  # Look a contact up in Airtable and HubSpot
  python functions.py contact --key "Jane Doe" --include-events
"""
import argparse
import json
import logging
import sys

from handlers import contact_records, fetch_calendar_events, renew_watch


def _post(body: dict) -> dict:
    return {"httpMethod": "POST", "headers": {}, "body": json.dumps(body)}


def _get(query: dict) -> dict:
    return {"httpMethod": "GET", "headers": {}, "queryStringParameters": query}


def run(args: argparse.Namespace) -> dict:
    """Invoke the handler for a parsed command and return its response."""
    if args.command == "renew-calendar-watch":
        stop = [{"id": c, "resourceId": r} for c, r in (args.stop_channel or [])]
        return renew_watch.renew_calendar_watch(_post({"stopChannels": stop}))

    if args.command == "renew-gmail-watch":
        return renew_watch.renew_gmail_watch(_post({"stopExisting": args.stop_existing}))

    if args.command == "fetch-events":
        body = {"resourceId": args.resource_id}
        if args.calendar_id:
            body["calendarId"] = args.calendar_id
        return fetch_calendar_events.handler(_post(body))

    if args.command == "contact":
        query = {"contactId": args.key, "format": "json"}
        if args.include_events:
            query["includeEvents"] = "true"
        return contact_records.handler(_get(query))

    raise ValueError(f"Unknown command: {args.command}")


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Calendar, mail and contact webhook functions")
    sub = parser.add_subparsers(dest="command")

    cal = sub.add_parser("renew-calendar-watch", help="Re-register the Calendar push channel")
    cal.add_argument(
        "--stop-channel",
        nargs=2,
        action="append",
        metavar=("CHANNEL_ID", "RESOURCE_ID"),
        help="Cancel an existing channel first (repeatable)",
    )

    gmail = sub.add_parser("renew-gmail-watch", help="Re-register the Gmail Pub/Sub watch")
    gmail.add_argument("--stop-existing", action="store_true", default=False,
                       help="Cancel the current mailbox watch first")

    fetch = sub.add_parser("fetch-events", help="List events around now for a notification")
    fetch.add_argument("--resource-id", required=True)
    fetch.add_argument("--calendar-id", default="", help="Calendar ID (default: CALENDAR_ID or primary)")

    contact = sub.add_parser("contact", help="Show matching Airtable and HubSpot records as JSON")
    contact.add_argument("--key", required=True, help="Contact name or email address")
    contact.add_argument("--include-events", action="store_true", default=False)

    return parser


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    parser = _build_arg_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    response = run(args)
    body = response.get("body", "")
    try:
        print(json.dumps(json.loads(body), indent=2))
    except ValueError:
        print(body)
    if response.get("statusCode", 500) >= 400:
        sys.exit(1)
