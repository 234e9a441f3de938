"""
Slack Handler

Handles Slack Events API payloads and converts them to tagged events.
"""

import hmac
import hashlib
import time
from typing import Optional, Dict, Any

from .base import BaseHandler, EventKind, InboundEvent, SlackEvent

# Slack event types that mean our token is no longer valid
_INVALID_AUTH_EVENTS = {"tokens_revoked", "app_uninstalled"}

SIGNATURE_MAX_AGE = 300  # seconds


class SlackHandler(BaseHandler):
    """
    Handler for Slack Events API webhooks.

    Maps:
    - message          -> MESSAGE (noise filtering happens in the router)
    - presence_change  -> PRESENCE_CHANGE
    - hello            -> HELLO
    - app_rate_limited -> ERROR
    - tokens_revoked / app_uninstalled -> INVALID_AUTH

    Everything else, including app_mention (Slack also sends the same text
    as a message event), is OTHER.
    """

    def __init__(self, signing_secret: str = ""):
        """
        Initialize Slack handler.

        Args:
            signing_secret: Slack signing secret for verification
        """
        super().__init__("slack")
        self._signing_secret = signing_secret

    def parse_event(self, raw_data: Dict[str, Any]) -> Optional[SlackEvent]:
        """
        Parse Slack payload into a tagged event.

        Args:
            raw_data: Raw Slack payload

        Returns:
            SlackEvent, or None for URL verification requests
        """
        payload_type = raw_data.get("type", "")

        if payload_type == "url_verification":
            return None

        if payload_type == "hello":
            return SlackEvent(kind=EventKind.HELLO, raw=raw_data)

        if payload_type == "app_rate_limited":
            return SlackEvent(kind=EventKind.ERROR, error="app_rate_limited", raw=raw_data)

        if payload_type != "event_callback":
            return SlackEvent(kind=EventKind.OTHER, raw=raw_data)

        event = raw_data.get("event", {})
        event_type = event.get("type", "")

        if event_type == "message":
            return SlackEvent(
                kind=EventKind.MESSAGE,
                message=self._parse_message_event(event),
                raw=raw_data,
            )

        if event_type == "presence_change":
            return SlackEvent(kind=EventKind.PRESENCE_CHANGE, raw=raw_data)

        if event_type in _INVALID_AUTH_EVENTS:
            return SlackEvent(kind=EventKind.INVALID_AUTH, error=event_type, raw=raw_data)

        return SlackEvent(kind=EventKind.OTHER, raw=raw_data)

    def _parse_message_event(self, event: Dict[str, Any]) -> InboundEvent:
        """Parse a message event. Edits and deletions keep an empty sender."""
        return InboundEvent(
            text=event.get("text") or "",
            sender_id=event.get("user") or "",
            channel_id=event.get("channel") or "",
            bot_id=event.get("bot_id") or "",
            subtype=event.get("subtype") or "",
            timestamp=event.get("ts") or "",
            thread_ts=event.get("thread_ts"),
        )

    def verify_signature(
        self,
        body: bytes,
        signature: str,
        timestamp: str
    ) -> bool:
        """
        Verify Slack request signature.

        Args:
            body: Raw request body
            signature: X-Slack-Signature header
            timestamp: X-Slack-Request-Timestamp header

        Returns:
            True if signature is valid
        """
        if not self._signing_secret:
            # Skip verification if no secret configured
            return True

        if not signature or not timestamp:
            return False

        # Check timestamp is recent (within 5 minutes)
        try:
            ts = int(timestamp)
            if abs(time.time() - ts) > SIGNATURE_MAX_AGE:
                return False
        except ValueError:
            return False

        # Compute expected signature
        sig_basestring = f"v0:{timestamp}:{body.decode('utf-8')}"
        expected_sig = "v0=" + hmac.new(
            self._signing_secret.encode('utf-8'),
            sig_basestring.encode('utf-8'),
            hashlib.sha256
        ).hexdigest()

        # Compare signatures
        return hmac.compare_digest(expected_sig, signature)

    def is_url_verification(self, raw_data: Dict[str, Any]) -> bool:
        """Check if request is URL verification"""
        return raw_data.get("type") == "url_verification"

    def get_challenge(self, raw_data: Dict[str, Any]) -> Optional[str]:
        """Get challenge for URL verification"""
        if self.is_url_verification(raw_data):
            return raw_data.get("challenge")
        return None
