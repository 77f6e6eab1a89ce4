"""Append-only progress timelines stored as JSON on orders and return requests.

At most one event is ``current``. Appending demotes the previous current
event to ``complete``; terminal outcomes are recorded as ``complete``
straight away so nothing stays current once the flow has ended.
"""

import json
from datetime import UTC, datetime
from enum import Enum


class TimelineStatus(Enum):
    COMPLETE = "complete"
    CURRENT = "current"
    UPCOMING = "upcoming"


def entry(title, description, status, timestamp=None) -> dict:
    return {
        "title": title,
        "description": description,
        "status": status.value if isinstance(status, TimelineStatus) else status,
        "timestamp": (timestamp or datetime.now(UTC)).isoformat(),
    }


def load(raw) -> list[dict]:
    if not raw:
        return []
    return json.loads(raw) if isinstance(raw, str) else list(raw)


def append(raw, title, description, terminal=False, timestamp=None) -> str:
    """Return the serialized timeline with a new event appended."""
    events = []
    for event in load(raw):
        if event.get("status") == TimelineStatus.CURRENT.value:
            event = {**event, "status": TimelineStatus.COMPLETE.value}
        events.append(event)

    status = TimelineStatus.COMPLETE if terminal else TimelineStatus.CURRENT
    events.append(entry(title, description, status, timestamp))
    return json.dumps(events)


def current(raw):
    return next((e for e in load(raw) if e.get("status") == TimelineStatus.CURRENT.value), None)


def initial_order_timeline(timestamp=None) -> str:
    return json.dumps(
        [
            entry(
                "Order received",
                "We've received your order and are processing it.",
                TimelineStatus.COMPLETE,
                timestamp,
            ),
            entry(
                "Payment processing",
                "Your payment is being verified.",
                TimelineStatus.CURRENT,
                timestamp,
            ),
            entry(
                "Preparing items",
                "We'll start packing your items once payment is confirmed.",
                TimelineStatus.UPCOMING,
                timestamp,
            ),
        ]
    )
