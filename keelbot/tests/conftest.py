"""Shared fixtures for Keel Bot tests."""

import pytest
from unittest.mock import AsyncMock, Mock


@pytest.fixture
def mock_transport():
    """SlackTransport double with every network call mocked"""
    from keelbot.slackbot.transport import SlackTransport

    transport = Mock(spec=SlackTransport)
    transport.list_users = AsyncMock(return_value=[])
    transport.get_channel_info = AsyncMock()
    transport.get_conversation_info = AsyncMock()
    transport.send_message = AsyncMock()
    transport.post_attachments = AsyncMock()
    transport.upload_file = AsyncMock()
    return transport


@pytest.fixture
def identity():
    from keelbot.slackbot.identity import BotIdentity

    return BotIdentity(id="U123", name="keel", mention_prefix="<@u123>")
