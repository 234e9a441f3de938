"""
Responder

Sends replies back into Slack. Short replies go inline as a code snippet,
long ones are uploaded as a text file. Failures are logged, never raised.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from .. import __version__
from ..common.errors import TransportError
from .transport import SlackTransport

logger = logging.getLogger("keelbot.slackbot.responder")

INLINE_REPLY_LIMIT = 3000
UPLOAD_FILENAME = "keel response"


def format_as_snippet(response: str) -> str:
    return "```" + response + "```"


class Responder:
    """Reply and notification sender"""

    def __init__(self, transport: SlackTransport, bot_name: str, approvals_channel: str):
        self._transport = transport
        self._bot_name = bot_name
        self._approvals_channel = approvals_channel

    async def respond(self, text: str, channel_id: str) -> None:
        """Reply to a channel"""
        if len(text) < INLINE_REPLY_LIMIT:
            try:
                await self._transport.send_message(format_as_snippet(text), channel_id)
            except TransportError as e:
                logger.error("Respond: failed to send message to %s: %s", channel_id, e)
            return

        # longer messages are getting uploaded as files
        try:
            await self._transport.upload_file(
                filename=UPLOAD_FILENAME,
                content=text,
                filetype="text",
                channel_id=channel_id,
            )
        except TransportError as e:
            logger.error("Respond: failed to upload response to %s: %s", channel_id, e)

    async def post_message(
        self,
        title: str,
        message: str,
        color: str,
        fields: Optional[List[Dict[str, Any]]] = None,
    ) -> bool:
        """
        Post an attachment into the approvals channel (approval requests,
        status updates). Served to the approvals consumer through
        ``POST /notifications``.

        Args:
            title: Message text shown above the attachment
            message: Attachment fallback text
            color: Attachment colour ("good", "danger" or a hex code)
            fields: Attachment fields ({"title", "value", "short"})

        Returns:
            True if Slack accepted the message
        """
        attachment = {
            "fallback": message,
            "color": color,
            "fields": fields or [],
            "footer": f"https://keel.sh {__version__}",
            "ts": int(time.time()),
        }

        try:
            await self._transport.post_attachments(
                channel_id=self._approvals_channel,
                text=title,
                attachments=[attachment],
                username=self._bot_name,
            )
        except TransportError as e:
            logger.error(
                "post_message: failed to send message to approvals channel %s: %s",
                self._approvals_channel, e,
            )
            return False
        return True
