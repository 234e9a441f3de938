"""
Keel Bot Schemas
"""

from .messages import ApprovalVote, BotMessage, Decision

__all__ = [
    "ApprovalVote",
    "BotMessage",
    "Decision",
]
