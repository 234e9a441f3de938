"""
Keel Bot

Slack integration that lets operators approve or reject deployment actions
from chat and send free-form commands to the deployment controller.

Philosophy:
- Votes are only authoritative in the approvals channel
- Never react to our own (or any other bot's) messages
- Transport failures fail closed and never stop event processing
- Every inbound message ends up in exactly one place (or nowhere)

Usage:
    from keelbot.common import load_config
    from keelbot.approvals import is_approval
    from keelbot.slackbot import EventRouter, SlackBot
"""

__version__ = "0.1.0"
