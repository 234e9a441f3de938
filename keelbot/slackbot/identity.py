"""
Bot Identity

Finds the bot's own user record in the workspace directory and derives the
mention prefix Slack injects when someone @-mentions the bot ("<@U123>").
"""

import logging
from dataclasses import dataclass
from typing import Iterable

from ..common.errors import IdentityNotFoundError
from .transport import SlackTransport, SlackUser

logger = logging.getLogger("keelbot.slackbot.identity")


@dataclass(frozen=True)
class BotIdentity:
    """Immutable identity of the running bot"""
    id: str
    name: str
    mention_prefix: str


def mention_prefix_for(user_id: str) -> str:
    return ("<@" + user_id + ">").lower()


def resolve_identity(bot_name: str, users: Iterable[SlackUser]) -> BotIdentity:
    """
    Resolve the bot identity from a directory snapshot.

    The first bot account whose name equals bot_name (case-sensitive) wins.

    Raises:
        IdentityNotFoundError: no bot account with that name
    """
    for user in users:
        if user.name == bot_name and user.is_bot:
            identity = BotIdentity(
                id=user.id,
                name=bot_name,
                mention_prefix=mention_prefix_for(user.id),
            )
            logger.info("Resolved bot identity: %s (%s)", identity.name, identity.id)
            return identity

    raise IdentityNotFoundError(bot_name)


async def fetch_identity(transport: SlackTransport, bot_name: str) -> BotIdentity:
    """List workspace users and resolve the bot identity. Any failure is fatal."""
    users = await transport.list_users()
    return resolve_identity(bot_name, users)
