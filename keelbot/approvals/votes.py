"""
Vote Parser

Recognizes approval/rejection votes in normalized (lower-cased, trimmed)
message text.

Accepted forms:
    approve <identifier>
    lgtm <identifier>
    reject <identifier>
    ...

The identifier names the pending approval (e.g. "deployment/myapp:1.2.3").
Whether the voter is allowed to vote is decided by the approvals consumer.
"""

import re
from typing import Callable, Optional

from ..common.schemas import ApprovalVote, Decision


APPROVE_KEYWORDS = ("lgtm", "approve", "approved")
REJECT_KEYWORDS = ("reject", "rejected")

KEYWORD_TO_DECISION = {
    **{k: Decision.APPROVE for k in APPROVE_KEYWORDS},
    **{k: Decision.REJECT for k in REJECT_KEYWORDS},
}

# keyword, then optional subject after whitespace or ':'
_VOTE_RE = re.compile(r"^(?P<keyword>[a-z]+)(?:[\s:]+(?P<subject>.*))?$", re.DOTALL)

# Signature of the vote parser the router depends on
VoteParser = Callable[[str, str], Optional[ApprovalVote]]


def is_approval(user: str, text: str) -> Optional[ApprovalVote]:
    """
    Parse a vote from message text.

    Args:
        user: Slack user ID of the sender
        text: Normalized message text with bot addressing stripped

    Returns:
        ApprovalVote, or None if the text is not vote-shaped
    """
    match = _VOTE_RE.match(text.strip())
    if not match:
        return None

    decision = KEYWORD_TO_DECISION.get(match.group("keyword"))
    if decision is None:
        return None

    subject = (match.group("subject") or "").strip()
    # a bare keyword names no approval
    if not subject:
        return None

    return ApprovalVote(
        voter_id=user,
        decision=decision,
        subject=subject,
        text=text,
    )
