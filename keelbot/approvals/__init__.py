"""
Approvals

Vote parsing for the approvals channel.
"""

from .votes import is_approval, VoteParser, APPROVE_KEYWORDS, REJECT_KEYWORDS

__all__ = [
    "is_approval",
    "VoteParser",
    "APPROVE_KEYWORDS",
    "REJECT_KEYWORDS",
]
