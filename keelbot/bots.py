"""
Bot Factories

Name -> factory table used at wiring time to build the chat bots. A factory
returns None when its bot is not configured.
"""

import logging
from typing import Awaitable, Callable, Dict, Optional

from .common.config import KeelBotConfig
from .common.schemas import ApprovalVote, BotMessage
from .slackbot.bot import SlackBot
from .slackbot.queues import DispatchQueue
from .slackbot.transport import SlackTransport

logger = logging.getLogger("keelbot.bots")

BotFactory = Callable[
    [KeelBotConfig, DispatchQueue[ApprovalVote], DispatchQueue[BotMessage]],
    Awaitable[Optional[SlackBot]],
]


async def build_slack_bot(
    config: KeelBotConfig,
    approvals: DispatchQueue[ApprovalVote],
    commands: DispatchQueue[BotMessage],
) -> Optional[SlackBot]:
    if not config.slack.is_configured:
        logger.info("Slack approval bot is not configured (SLACK_TOKEN not set)")
        return None

    transport = SlackTransport.from_token(config.slack.token)
    return await SlackBot.start(transport, config, approvals=approvals, commands=commands)


def default_factories() -> Dict[str, BotFactory]:
    return {"slack": build_slack_bot}


async def configure_bots(
    config: KeelBotConfig,
    approvals: DispatchQueue[ApprovalVote],
    commands: DispatchQueue[BotMessage],
    factories: Dict[str, BotFactory],
) -> Dict[str, SlackBot]:
    """
    Build every configured bot. All bots share the two output queues.

    Startup errors (e.g. IdentityNotFoundError) propagate.
    """
    bots: Dict[str, SlackBot] = {}
    for name, factory in factories.items():
        bot = await factory(config, approvals, commands)
        if bot is None:
            continue
        logger.info("Bot %s configured", name)
        bots[name] = bot
    return bots
