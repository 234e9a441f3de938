"""
Slack Bot

Owns the single event-processing task. Events are taken from the inbound
queue strictly in delivery order and each one is fully routed before the
next is read.
"""

import asyncio
import logging
from typing import Optional

from ..approvals import VoteParser
from ..common.config import KeelBotConfig
from ..common.errors import InvalidAuthError
from ..common.schemas import ApprovalVote, BotMessage
from .channels import ChannelClassifier
from .handlers import EventKind, SlackEvent
from .identity import BotIdentity, fetch_identity
from .queues import DispatchQueue
from .responder import Responder
from .router import EventRouter
from .transport import SlackTransport

logger = logging.getLogger("keelbot.slackbot.bot")


class SlackBot:
    """
    Slack approvals bot.

    Downstream consumers read from ``approvals`` (ApprovalVote) and
    ``commands`` (BotMessage).
    """

    def __init__(
        self,
        transport: SlackTransport,
        identity: BotIdentity,
        config: KeelBotConfig,
        vote_parser: Optional[VoteParser] = None,
        approvals: Optional[DispatchQueue[ApprovalVote]] = None,
        commands: Optional[DispatchQueue[BotMessage]] = None,
    ):
        dispatch = config.dispatch
        approvals_channel = config.slack.approvals_channel

        self.transport = transport
        self.identity = identity
        self.approvals = approvals or DispatchQueue(
            "approvals", dispatch.approvals_queue_size, dispatch.enqueue_timeout
        )
        self.commands = commands or DispatchQueue(
            "commands", dispatch.commands_queue_size, dispatch.enqueue_timeout
        )
        self.responder = Responder(transport, identity.name, approvals_channel)
        self.router = EventRouter(
            identity=identity,
            classifier=ChannelClassifier(transport, approvals_channel, dispatch.lookup_timeout),
            responder=self.responder,
            approvals=self.approvals,
            commands=self.commands,
            vote_parser=vote_parser,
        )
        self.running = False

    @classmethod
    async def start(
        cls,
        transport: SlackTransport,
        config: KeelBotConfig,
        vote_parser: Optional[VoteParser] = None,
        approvals: Optional[DispatchQueue[ApprovalVote]] = None,
        commands: Optional[DispatchQueue[BotMessage]] = None,
    ) -> "SlackBot":
        """
        Resolve the bot identity and build the bot.

        Raises:
            IdentityNotFoundError: the bot account does not exist
            TransportError: the user directory could not be fetched
        """
        identity = await fetch_identity(transport, config.slack.bot_name)
        return cls(transport, identity, config, vote_parser, approvals, commands)

    async def dispatch(self, event: SlackEvent) -> None:
        """Handle one tagged event"""
        if event.kind == EventKind.MESSAGE and event.message is not None:
            await self.router.handle(event.message)
        elif event.kind == EventKind.ERROR:
            logger.error("Error: %s", event.error)
        elif event.kind == EventKind.INVALID_AUTH:
            logger.error("Invalid credentials (%s)", event.error)
            raise InvalidAuthError("invalid credentials", code=event.error)
        elif event.kind == EventKind.CONNECTED:
            logger.info("Connected as %s (%s)", self.identity.name, self.identity.id)
        # hello, presence changes and everything else need no action

    async def run(self, events: "asyncio.Queue[SlackEvent]", stop: asyncio.Event) -> None:
        """
        Process events until ``stop`` is set.

        An event that is being routed when ``stop`` is set is finished first;
        events still queued are left unprocessed. An event that fails to route
        is logged and skipped.

        Raises:
            InvalidAuthError: Slack revoked our credentials
        """
        self.running = True
        stop_wait = asyncio.ensure_future(stop.wait())
        next_event: Optional[asyncio.Future] = None
        try:
            while not stop.is_set():
                next_event = asyncio.ensure_future(events.get())
                await asyncio.wait({next_event, stop_wait}, return_when=asyncio.FIRST_COMPLETED)

                if not next_event.done():
                    break

                # already dequeued, so it is routed even if stop was set meanwhile
                event = next_event.result()
                try:
                    await self.dispatch(event)
                except InvalidAuthError:
                    raise
                except Exception:
                    logger.exception("Failed to route %s event", event.kind.value)
                finally:
                    events.task_done()
        finally:
            if next_event is not None and not next_event.done():
                next_event.cancel()
            stop_wait.cancel()
            self.running = False
            logger.info("Slack bot event loop stopped")
