"""
Channel Classifier

Decides whether a message arrived in the approvals channel.

Algorithm:
1. Look the channel up as a public channel (cached)
2. If that fails, look it up as a private/direct conversation, bypassing the cache
3. If both fail, it is not the approvals channel (fail closed)
"""

import asyncio
import logging

from ..common.errors import TransportError
from .transport import ChannelInfo, SlackTransport

logger = logging.getLogger("keelbot.slackbot.channels")


class ChannelClassifier:
    """Answers "is this the approvals channel?" for channel IDs"""

    def __init__(
        self,
        transport: SlackTransport,
        approvals_channel: str,
        lookup_timeout: float = 5.0,
    ):
        """
        Args:
            transport: Slack transport used for lookups
            approvals_channel: Approvals channel name, without leading '#'
            lookup_timeout: Seconds allowed per lookup
        """
        self._transport = transport
        self._approvals_channel = approvals_channel
        self._lookup_timeout = lookup_timeout

    @property
    def approvals_channel(self) -> str:
        return self._approvals_channel

    async def _bounded(self, lookup) -> ChannelInfo:
        try:
            return await asyncio.wait_for(lookup, timeout=self._lookup_timeout)
        except asyncio.TimeoutError as e:
            raise TransportError(f"lookup timed out after {self._lookup_timeout}s") from e

    async def is_approvals_channel(self, channel_id: str) -> bool:
        try:
            channel = await self._bounded(self._transport.get_channel_info(channel_id))
        except TransportError as public_err:
            # private channel or direct message
            try:
                conversation = await self._bounded(
                    self._transport.get_conversation_info(channel_id, use_cache=False)
                )
            except TransportError as e:
                logger.error(
                    "channel with ID %s could not be retrieved (public: %s, private: %s)",
                    channel_id, public_err, e,
                )
                return False

            return conversation.name == self._approvals_channel

        logger.debug("checking if approvals channel: %s==%s", channel.name, self._approvals_channel)
        if channel.name == self._approvals_channel:
            return True

        logger.debug("message was received not on approvals channel (%s)", channel.name)
        return False
