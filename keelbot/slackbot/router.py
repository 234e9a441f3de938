"""
Event Router

Classifies inbound Slack messages and routes each one to exactly one place.

Pipeline (per event):
1. Noise filter: drop messages from bots (including ourselves) and
   messages without a human sender
2. Normalize: lower-case, trim whitespace
3. Addressed filter: keep messages that mention the bot, start with its
   name, or arrive in a direct message channel
4. Strip the mention prefix (or the bot name)
5. Votes go to the approvals queue, but only from the approvals channel;
   everything else goes to the commands queue

The router keeps no state between events apart from the bot identity and
the approvals channel name.
"""

import logging
from collections import Counter
from enum import Enum
from typing import Dict, Optional

from ..approvals import VoteParser, is_approval
from ..common.schemas import ApprovalVote, BotMessage
from .channels import ChannelClassifier
from .handlers import InboundEvent
from .identity import BotIdentity
from .queues import DispatchQueue
from .responder import Responder

logger = logging.getLogger("keelbot.slackbot.router")

SOURCE_NAME = "slack"

# Direct message channel IDs always start with 'D'
DM_CHANNEL_PREFIX = "D"


class RouteResult(str, Enum):
    """Terminal state of a routed event"""
    IGNORED = "ignored"
    NOT_ADDRESSED = "not_addressed"
    VOTE_DISPATCHED = "vote_dispatched"
    WRONG_CHANNEL = "wrong_channel"
    COMMAND_DISPATCHED = "command_dispatched"
    DROPPED = "dropped"


def is_noise(event: InboundEvent) -> bool:
    return event.bot_id != "" or event.sender_id == "" or event.subtype == "bot_message"


def normalize_text(text: str) -> str:
    return text.lower().strip(" \n\r")


class EventRouter:
    """
    Routes inbound messages to the approvals or commands queue.

    Transport failures are handled inside the classifier and responder,
    so handle() never raises on them.
    """

    def __init__(
        self,
        identity: BotIdentity,
        classifier: ChannelClassifier,
        responder: Responder,
        approvals: DispatchQueue[ApprovalVote],
        commands: DispatchQueue[BotMessage],
        vote_parser: Optional[VoteParser] = None,
    ):
        self._identity = identity
        self._classifier = classifier
        self._responder = responder
        self._approvals = approvals
        self._commands = commands
        self._vote_parser = vote_parser or is_approval
        self._bot_name = identity.name.lower()
        self.stats: Dict[str, int] = Counter()

    @property
    def identity(self) -> BotIdentity:
        return self._identity

    @property
    def approvals_channel(self) -> str:
        return self._classifier.approvals_channel

    def is_addressed(self, event: InboundEvent, text: str) -> bool:
        """Check if normalized text is directed at the bot"""
        for prefix in (self._identity.mention_prefix, self._bot_name):
            if text.startswith(prefix):
                return True

        return event.channel_id.startswith(DM_CHANNEL_PREFIX)

    def strip_addressing(self, text: str) -> str:
        """Remove one leading mention (or bot name) and separators around it"""
        if text.startswith(self._identity.mention_prefix):
            text = text[len(self._identity.mention_prefix):]
        elif text.startswith(self._bot_name):
            text = text[len(self._bot_name):]

        return text.strip(" :\n")

    async def handle(self, event: InboundEvent) -> RouteResult:
        result = await self._route(event)
        self.stats[result.value] += 1
        return result

    async def _route(self, event: InboundEvent) -> RouteResult:
        if is_noise(event):
            logger.debug(
                "handle: ignoring message (bot_id=%r, user=%r, subtype=%r, text=%r)",
                event.bot_id, event.sender_id, event.subtype, event.text,
            )
            return RouteResult.IGNORED

        text = normalize_text(event.text)

        if not self.is_addressed(event, text):
            return RouteResult.NOT_ADDRESSED

        text = self.strip_addressing(text)

        vote = self._vote_parser(event.sender_id, text)
        if vote is not None:
            # only accepting approvals from approvals channel
            if await self._classifier.is_approvals_channel(event.channel_id):
                if not await self._approvals.put(vote):
                    return RouteResult.DROPPED
                return RouteResult.VOTE_DISPATCHED

            logger.warning(
                "message was received not in approvals channel: %s (approvals channel: %s)",
                event.channel_id, self.approvals_channel,
            )
            await self._responder.respond(
                f"please use approvals channel '{self.approvals_channel}'",
                event.channel_id,
            )
            return RouteResult.WRONG_CHANNEL

        message = BotMessage(
            text=text,
            sender_id=event.sender_id,
            channel_id=event.channel_id,
            source_name=SOURCE_NAME,
        )
        if not await self._commands.put(message):
            return RouteResult.DROPPED
        return RouteResult.COMMAND_DISPATCHED
