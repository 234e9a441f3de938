"""
Base Handler

Abstract base class for transport-specific event handlers.
Provides a common interface for converting raw payloads to events.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any


class EventKind(str, Enum):
    """Closed set of event kinds the bot loop switches on"""
    HELLO = "hello"
    CONNECTED = "connected"
    MESSAGE = "message"
    PRESENCE_CHANGE = "presence_change"
    ERROR = "error"
    INVALID_AUTH = "invalid_auth"
    OTHER = "other"


@dataclass
class InboundEvent:
    """
    A chat message as received from the transport.

    bot_id is empty for human-authored messages.
    """
    text: str
    sender_id: str
    channel_id: str
    bot_id: str = ""
    subtype: str = ""
    timestamp: str = ""
    thread_ts: Optional[str] = None


@dataclass
class SlackEvent:
    """
    Tagged event envelope.

    Only MESSAGE events carry a message; ERROR events carry an error string.
    """
    kind: EventKind
    message: Optional[InboundEvent] = None
    error: Optional[str] = None
    raw: Optional[Dict[str, Any]] = None


class BaseHandler(ABC):
    """
    Abstract base class for transport handlers.

    Each handler must implement:
    - parse_event: Convert raw payload to a tagged event
    - verify_signature: Verify webhook signature (if applicable)
    """

    def __init__(self, source_name: str):
        """
        Initialize handler.

        Args:
            source_name: Name of the transport (e.g., "slack")
        """
        self.source_name = source_name

    @abstractmethod
    def parse_event(self, raw_data: Dict[str, Any]) -> Optional[SlackEvent]:
        """
        Parse raw payload into a tagged event.

        Args:
            raw_data: Raw payload from the transport

        Returns:
            SlackEvent or None if the payload is not an event
        """
        pass

    @abstractmethod
    def verify_signature(
        self,
        body: bytes,
        signature: str,
        timestamp: str
    ) -> bool:
        """
        Verify the webhook signature.

        Args:
            body: Raw request body
            signature: Signature from headers
            timestamp: Timestamp from headers

        Returns:
            True if signature is valid
        """
        pass
