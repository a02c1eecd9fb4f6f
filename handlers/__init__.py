"""HTTP-triggered functions.

Each module exposes a trigger-style callable, handler(event, context=None,
settings=None), that returns {"statusCode", "headers", "body"}.
renew_watch exposes renew_calendar_watch and renew_gmail_watch.
"""
