"""Tests for the bot factory table."""

import pytest
from unittest.mock import AsyncMock, patch


@pytest.fixture
def queues():
    from keelbot.slackbot.queues import DispatchQueue
    return DispatchQueue("approvals"), DispatchQueue("commands")


class TestBuildSlackBot:

    @pytest.mark.asyncio
    async def test_not_configured_without_token(self, queues):
        from keelbot.bots import build_slack_bot
        from keelbot.common.config import KeelBotConfig

        assert await build_slack_bot(KeelBotConfig(), *queues) is None

    @pytest.mark.asyncio
    async def test_builds_with_token(self, queues, mock_transport):
        from keelbot.bots import build_slack_bot
        from keelbot.common.config import KeelBotConfig
        from keelbot.slackbot.transport import SlackUser
        cfg = KeelBotConfig()
        cfg.slack.token = "xoxb-test"
        mock_transport.list_users.return_value = [SlackUser(id="U1", name="keel", is_bot=True)]

        with patch("keelbot.bots.SlackTransport.from_token", return_value=mock_transport) as from_token:
            bot = await build_slack_bot(cfg, *queues)

        from_token.assert_called_once_with("xoxb-test")
        assert bot.identity.id == "U1"
        assert bot.approvals is queues[0]
        assert bot.commands is queues[1]


class TestConfigureBots:

    @pytest.mark.asyncio
    async def test_skips_unconfigured(self, queues):
        from keelbot.bots import configure_bots
        from keelbot.common.config import KeelBotConfig
        sentinel = object()
        factories = {
            "slack": AsyncMock(return_value=None),
            "other": AsyncMock(return_value=sentinel),
        }

        bots = await configure_bots(KeelBotConfig(), *queues, factories)

        assert bots == {"other": sentinel}

    @pytest.mark.asyncio
    async def test_startup_error_propagates(self, queues):
        from keelbot.bots import configure_bots
        from keelbot.common.config import KeelBotConfig
        from keelbot.common.errors import IdentityNotFoundError
        factories = {"slack": AsyncMock(side_effect=IdentityNotFoundError("keel"))}

        with pytest.raises(IdentityNotFoundError):
            await configure_bots(KeelBotConfig(), *queues, factories)

    def test_default_factories(self):
        from keelbot.bots import build_slack_bot, default_factories

        assert default_factories() == {"slack": build_slack_bot}
