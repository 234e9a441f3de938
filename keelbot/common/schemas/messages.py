"""
Dispatch Schemas

Records handed off by the event router to downstream consumers:
- ApprovalVote -> approvals pipeline
- BotMessage   -> generic command pipeline
"""

from enum import Enum
from pydantic import BaseModel, Field


# ============================================================================
# Enums
# ============================================================================

class Decision(str, Enum):
    """Outcome of an approval vote"""
    APPROVE = "approve"
    REJECT = "reject"
    UNKNOWN = "unknown"


# ============================================================================
# Records
# ============================================================================

class ApprovalVote(BaseModel):
    """A vote cast by an operator in the approvals channel"""
    voter_id: str = Field(..., description="Slack user ID of the voter")
    decision: Decision
    subject: str = Field(default="", description="Identifier of the approval being voted on")
    text: str = Field(default="", description="Normalized message text the vote was parsed from")


class BotMessage(BaseModel):
    """A bot-directed message that is not a vote"""
    text: str
    sender_id: str
    channel_id: str
    source_name: str = Field(default="slack", description="Transport that received the message")
