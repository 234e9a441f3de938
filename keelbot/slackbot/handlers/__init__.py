"""
Transport Handlers

Each handler converts transport-specific payloads to tagged events.

Available Handlers:
- SlackHandler: Slack Events API webhooks
"""

from .base import BaseHandler, EventKind, InboundEvent, SlackEvent
from .slack import SlackHandler

__all__ = [
    "BaseHandler",
    "EventKind",
    "InboundEvent",
    "SlackEvent",
    "SlackHandler",
]
