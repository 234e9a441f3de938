"""
Keel Bot Errors

Only identity resolution (and revoked credentials) may stop the bot.
Everything else is a TransportError that gets logged where it happens.
"""

from typing import Optional


class KeelBotError(Exception):
    """Base class for Keel Bot errors."""
    pass


class IdentityNotFoundError(KeelBotError):
    """The configured bot name has no matching bot account in the workspace."""

    def __init__(self, bot_name: str):
        self.bot_name = bot_name
        super().__init__(
            f'could not find bot in the list of names, check if the bot is called "{bot_name}"'
        )


class TransportError(KeelBotError):
    """Error talking to the Slack Web API."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.code = code
        super().__init__(message)


class InvalidAuthError(TransportError):
    """Slack rejected our credentials."""
    pass
