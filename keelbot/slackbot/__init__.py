"""
Slack Bot - Approvals and Commands over Slack

Receives Slack messages, recognizes approval votes and bot commands and
hands them to the approvals and command pipelines.

Key Components:
- SlackHandler: Events API payload parsing and signature verification
- SlackTransport: Slack Web API access
- ChannelClassifier: Approvals channel detection
- EventRouter: Noise filtering, addressing, vote/command routing
- Responder: Replies and approval notifications
- SlackBot: The single event-processing task
"""

from .bot import SlackBot
from .channels import ChannelClassifier
from .handlers import EventKind, InboundEvent, SlackEvent, SlackHandler
from .identity import BotIdentity, resolve_identity
from .queues import DispatchQueue
from .responder import Responder
from .router import EventRouter, RouteResult
from .transport import ChannelInfo, SlackTransport, SlackUser

__all__ = [
    "SlackBot",
    "ChannelClassifier",
    "EventKind",
    "InboundEvent",
    "SlackEvent",
    "SlackHandler",
    "BotIdentity",
    "resolve_identity",
    "DispatchQueue",
    "Responder",
    "EventRouter",
    "RouteResult",
    "ChannelInfo",
    "SlackTransport",
    "SlackUser",
]
