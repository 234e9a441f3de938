"""
Slack Transport

Async wrapper over the Slack Web API used by the bot:
- users.list           (identity resolution at startup)
- conversations.info   (approvals channel classification)
- chat.postMessage     (replies and approval notifications)
- files.upload v2      (long replies)

Every Slack or network failure is raised as TransportError.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import aiohttp
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from ..common.errors import TransportError

logger = logging.getLogger("keelbot.slackbot.transport")

USERS_PAGE_SIZE = 200


@dataclass
class SlackUser:
    """Workspace directory entry"""
    id: str
    name: str
    is_bot: bool = False


@dataclass
class ChannelInfo:
    """Conversation metadata we care about"""
    id: str
    name: str
    is_private: bool = False
    is_im: bool = False
    is_mpim: bool = False

    @property
    def is_public(self) -> bool:
        return not (self.is_private or self.is_im or self.is_mpim)

    @classmethod
    def from_api(cls, channel: Dict[str, Any]) -> "ChannelInfo":
        return cls(
            id=channel.get("id", ""),
            name=channel.get("name") or "",
            is_private=bool(channel.get("is_private")),
            is_im=bool(channel.get("is_im")),
            is_mpim=bool(channel.get("is_mpim")),
        )


class SlackTransport:
    """
    Slack Web API client.

    Conversation lookups are cached by channel ID. The public-channel lookup
    serves from the cache; the conversation lookup can bypass it.
    """

    def __init__(self, client: AsyncWebClient):
        self._client = client
        self._channels: Dict[str, ChannelInfo] = {}

    @classmethod
    def from_token(cls, token: str) -> "SlackTransport":
        return cls(AsyncWebClient(token=token))

    async def _call(self, method: str, **kwargs) -> Any:
        """Call a Web API method, translating failures to TransportError"""
        try:
            return await getattr(self._client, method)(**kwargs)
        except SlackApiError as e:
            code = e.response.get("error") if e.response is not None else None
            raise TransportError(f"{method} failed: {code or e}", code=code) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"{method} failed: {e!r}") from e

    # =========================================================================
    # Directory
    # =========================================================================

    async def list_users(self) -> List[SlackUser]:
        """Snapshot of all workspace users, in API order"""
        users: List[SlackUser] = []
        cursor: Optional[str] = None

        while True:
            response = await self._call("users_list", cursor=cursor, limit=USERS_PAGE_SIZE)
            for member in response.get("members", []):
                users.append(SlackUser(
                    id=member.get("id", ""),
                    name=member.get("name", ""),
                    is_bot=bool(member.get("is_bot")),
                ))

            cursor = (response.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                break

        logger.debug("Fetched %d workspace users", len(users))
        return users

    async def get_channel_info(self, channel_id: str) -> ChannelInfo:
        """
        Look up a public channel.

        Raises:
            TransportError: lookup failed or the conversation is not public
        """
        info = self._channels.get(channel_id)
        if info is None:
            response = await self._call("conversations_info", channel=channel_id)
            info = ChannelInfo.from_api(response.get("channel", {}))
            self._channels[channel_id] = info

        if not info.is_public:
            raise TransportError(
                f"channel {channel_id} is not a public channel",
                code="channel_not_found",
            )
        return info

    async def get_conversation_info(self, channel_id: str, use_cache: bool = True) -> ChannelInfo:
        """Look up any conversation (public, private, direct)"""
        if use_cache and channel_id in self._channels:
            return self._channels[channel_id]

        response = await self._call("conversations_info", channel=channel_id)
        info = ChannelInfo.from_api(response.get("channel", {}))
        self._channels[channel_id] = info
        return info

    # =========================================================================
    # Outbound
    # =========================================================================

    async def send_message(self, text: str, channel_id: str) -> None:
        await self._call("chat_postMessage", channel=channel_id, text=text)

    async def post_attachments(
        self,
        channel_id: str,
        text: str,
        attachments: List[Dict[str, Any]],
        username: Optional[str] = None,
    ) -> None:
        await self._call(
            "chat_postMessage",
            channel=channel_id,
            text=text,
            attachments=attachments,
            username=username,
        )

    async def upload_file(
        self,
        filename: str,
        content: str,
        filetype: str = "text",
        channel_id: Optional[str] = None,
    ) -> None:
        await self._call(
            "files_upload_v2",
            filename=filename,
            title=filename,
            content=content,
            snippet_type=filetype,
            channel=channel_id,
        )
