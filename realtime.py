"""Realtime push of report changes over websockets.

Every connection gets its own channel name so two views subscribing with the
same filter never share (or tear down) each other's subscription. Changes are
published once per topic and each subscription rewrites them into what its
client should see given its status/category filter.

A change message looks like::

    {"type": "change", "event": "INSERT" | "UPDATE" | "DELETE",
     "new": {...report...} | None, "old": {"id": ...} | None}
"""
from typing import Dict, List, Optional
from fastapi import WebSocket
import logging
import uuid

logger = logging.getLogger(__name__)

REPORTS = "reports"
NOTIFICATIONS = "notifications"


def change_message(event: str, new: Optional[dict] = None, old: Optional[dict] = None) -> dict:
    return {"type": "change", "event": event, "new": new, "old": old}


def matches_filter(row: dict, status: str = "active", category: str = "all") -> bool:
    if status != "all" and row.get("status") != status:
        return False
    if category != "all" and row.get("category") != category:
        return False
    return True


def apply_change(reports: List[dict], change: dict, status: str = "active", category: str = "all") -> List[dict]:
    """Merge a change into a local list of reports, returning a new list."""
    event = change["event"]

    if event == "DELETE":
        old_id = (change.get("old") or {}).get("id")
        return [r for r in reports if r["id"] != old_id]

    row = change["new"]
    present = any(r["id"] == row["id"] for r in reports)

    if not matches_filter(row, status, category):
        return [r for r in reports if r["id"] != row["id"]]

    if event == "INSERT" or not present:
        return [row] + [r for r in reports if r["id"] != row["id"]]

    return [{**r, **row} if r["id"] == row["id"] else r for r in reports]


class Subscription:
    def __init__(self, websocket: WebSocket, topic: str, status: str = "active", category: str = "all"):
        self.websocket = websocket
        self.topic = topic
        self.channel = f"{topic}-{uuid.uuid4().hex[:12]}"
        self.status = status
        self.category = category

    def translate(self, message: dict) -> Optional[dict]:
        """What this subscriber should receive for `message`, or None."""
        if self.topic != REPORTS:
            return message

        event = message["event"]
        if event == "DELETE":
            return message

        row = message["new"]
        if matches_filter(row, self.status, self.category):
            return message
        if event == "UPDATE":
            # Row left this subscriber's view
            return change_message("DELETE", old={"id": row["id"]})
        return None


class ConnectionManager:
    def __init__(self):
        self.subscriptions: Dict[str, Subscription] = {}

    async def connect(self, websocket: WebSocket, topic: str, **filters) -> Subscription:
        await websocket.accept()
        subscription = Subscription(websocket, topic, **filters)
        self.subscriptions[subscription.channel] = subscription
        logger.info("Subscribed %s", subscription.channel)
        return subscription

    def disconnect(self, subscription: Subscription):
        if self.subscriptions.pop(subscription.channel, None) is not None:
            logger.info("Unsubscribed %s", subscription.channel)

    def channels(self, topic: Optional[str] = None) -> List[str]:
        return [c for c, s in self.subscriptions.items() if topic is None or s.topic == topic]

    async def broadcast(self, topic: str, message: dict):
        for subscription in list(self.subscriptions.values()):
            if subscription.topic != topic:
                continue
            payload = subscription.translate(message)
            if payload is None:
                continue
            try:
                await subscription.websocket.send_json(payload)
            except Exception as exc:
                logger.warning("Dropping dead connection %s: %r", subscription.channel, exc)
                self.disconnect(subscription)


manager = ConnectionManager()
