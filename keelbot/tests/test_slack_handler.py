"""
Tests for the Slack Handler

Tests payload parsing into tagged events and request signature checks.
"""

import hashlib
import hmac
import time

import pytest


def _message_payload(**event_fields):
    event = {"type": "message", "text": "hello", "user": "U999", "channel": "C1", "ts": "1.0"}
    event.update(event_fields)
    return {"type": "event_callback", "team_id": "T1", "event": event}


class TestParseEvent:

    @pytest.fixture
    def handler(self):
        from keelbot.slackbot.handlers import SlackHandler
        return SlackHandler()

    def test_message_event(self, handler):
        from keelbot.slackbot.handlers import EventKind

        event = handler.parse_event(_message_payload(text="<@U123> status", thread_ts="0.5"))

        assert event.kind == EventKind.MESSAGE
        assert event.message.text == "<@U123> status"
        assert event.message.sender_id == "U999"
        assert event.message.channel_id == "C1"
        assert event.message.bot_id == ""
        assert event.message.subtype == ""
        assert event.message.thread_ts == "0.5"

    def test_bot_message_keeps_bot_fields(self, handler):
        event = handler.parse_event(
            _message_payload(bot_id="B1", subtype="bot_message", user=None)
        )

        assert event.message.bot_id == "B1"
        assert event.message.subtype == "bot_message"
        assert event.message.sender_id == ""

    def test_message_changed_has_no_sender(self, handler):
        payload = _message_payload(subtype="message_changed", message={"text": "edited", "user": "U9"})
        del payload["event"]["user"]

        event = handler.parse_event(payload)

        assert event.message.sender_id == ""
        assert event.message.subtype == "message_changed"

    def test_url_verification_is_not_an_event(self, handler):
        assert handler.parse_event({"type": "url_verification", "challenge": "abc"}) is None

    def test_presence_change(self, handler):
        from keelbot.slackbot.handlers import EventKind

        event = handler.parse_event({"type": "event_callback", "event": {"type": "presence_change"}})

        assert event.kind == EventKind.PRESENCE_CHANGE

    def test_app_mention_is_other(self, handler):
        from keelbot.slackbot.handlers import EventKind

        event = handler.parse_event({"type": "event_callback", "event": {"type": "app_mention"}})

        assert event.kind == EventKind.OTHER
        assert event.message is None

    @pytest.mark.parametrize("event_type", ["tokens_revoked", "app_uninstalled"])
    def test_invalid_auth(self, handler, event_type):
        from keelbot.slackbot.handlers import EventKind

        event = handler.parse_event({"type": "event_callback", "event": {"type": event_type}})

        assert event.kind == EventKind.INVALID_AUTH
        assert event.error == event_type

    def test_rate_limited_is_error(self, handler):
        from keelbot.slackbot.handlers import EventKind

        event = handler.parse_event({"type": "app_rate_limited", "minute_rate_limited": 1})

        assert event.kind == EventKind.ERROR
        assert event.error == "app_rate_limited"

    def test_hello(self, handler):
        from keelbot.slackbot.handlers import EventKind

        assert handler.parse_event({"type": "hello"}).kind == EventKind.HELLO

    def test_unknown_payload_is_other(self, handler):
        from keelbot.slackbot.handlers import EventKind

        assert handler.parse_event({"type": "block_actions"}).kind == EventKind.OTHER


class TestVerifySignature:

    SECRET = "8f742231b10e8888abcd99yyyzzz85a5"

    def _sign(self, body: bytes, timestamp: str) -> str:
        base = f"v0:{timestamp}:{body.decode('utf-8')}"
        return "v0=" + hmac.new(self.SECRET.encode(), base.encode(), hashlib.sha256).hexdigest()

    def test_valid_signature(self):
        from keelbot.slackbot.handlers import SlackHandler
        handler = SlackHandler(signing_secret=self.SECRET)
        body = b'{"type": "event_callback"}'
        ts = str(int(time.time()))

        assert handler.verify_signature(body, self._sign(body, ts), ts) is True

    def test_tampered_body(self):
        from keelbot.slackbot.handlers import SlackHandler
        handler = SlackHandler(signing_secret=self.SECRET)
        ts = str(int(time.time()))
        signature = self._sign(b'{"a": 1}', ts)

        assert handler.verify_signature(b'{"a": 2}', signature, ts) is False

    def test_stale_timestamp(self):
        from keelbot.slackbot.handlers import SlackHandler
        handler = SlackHandler(signing_secret=self.SECRET)
        body = b"{}"
        ts = str(int(time.time()) - 600)

        assert handler.verify_signature(body, self._sign(body, ts), ts) is False

    def test_missing_headers(self):
        from keelbot.slackbot.handlers import SlackHandler
        handler = SlackHandler(signing_secret=self.SECRET)

        assert handler.verify_signature(b"{}", "", "") is False

    def test_no_secret_skips_verification(self):
        from keelbot.slackbot.handlers import SlackHandler
        handler = SlackHandler()

        assert handler.verify_signature(b"{}", "", "") is True


class TestChallenge:
    def test_get_challenge(self):
        from keelbot.slackbot.handlers import SlackHandler
        handler = SlackHandler()

        assert handler.get_challenge({"type": "url_verification", "challenge": "xyz"}) == "xyz"
        assert handler.get_challenge({"type": "event_callback"}) is None
