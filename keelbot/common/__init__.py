"""
Keel Bot Common Module

Shared configuration, errors, logging and record schemas.
"""

from .config import KeelBotConfig, load_config
from .errors import KeelBotError, IdentityNotFoundError, TransportError, InvalidAuthError
from .schemas import ApprovalVote, BotMessage, Decision

__all__ = [
    "KeelBotConfig",
    "load_config",
    "KeelBotError",
    "IdentityNotFoundError",
    "TransportError",
    "InvalidAuthError",
    "ApprovalVote",
    "BotMessage",
    "Decision",
]
