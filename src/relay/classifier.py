"""Routing of inbound chat events."""

from __future__ import annotations

from enum import Enum

from src.models import GROUP_SUFFIX, InboundEvent, MessageKind


class Route(str, Enum):
    IGNORE = "ignore"  # not ready, self, status broadcast, group
    VOICE = "voice"
    TEXT = "text"
    DROP = "drop"  # unsupported kind; no counters touched


def classify(event: InboundEvent | None, ready: bool) -> Route:
    """Decide how the relay handles ``event``.

    Group-origin and self-sent events are ignored before any other check
    so they never reach the webhook.
    """
    if event is None or not event.sender_id:
        return Route.IGNORE
    if event.is_group_originated or event.sender_id.endswith(GROUP_SUFFIX):
        return Route.IGNORE
    if not ready:
        return Route.IGNORE
    if event.is_self_originated or event.is_status_broadcast:
        return Route.IGNORE

    if event.kind == MessageKind.VOICE:
        return Route.VOICE
    if event.kind == MessageKind.TEXT and isinstance(event.body, str):
        return Route.TEXT
    return Route.DROP
