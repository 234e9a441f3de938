"""
Keel Bot Server

FastAPI server receiving Slack events and exposing the dispatch queues.

Endpoints:
- POST /slack/events: Slack Events API webhook
- GET /health: Health check
- GET /stats: Queue and routing statistics
- GET /approvals: Drain pending approval votes
- GET /commands: Drain pending bot commands
- POST /notifications: Announce an approval request in the approvals channel

Pipeline:
1. Verify and parse webhook payload
2. Put the tagged event on the inbound queue
3. The bot task routes events one at a time, in delivery order
4. Votes and commands land on their output queues
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, HTTPException, Header, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .. import __version__
from ..bots import configure_bots, default_factories
from ..common.config import load_config, KeelBotConfig, ensure_directories
from ..common.logs import setup_logging
from ..common.schemas import ApprovalVote, BotMessage
from .bot import SlackBot
from .handlers import EventKind, SlackEvent, SlackHandler
from .queues import DispatchQueue

logger = logging.getLogger("keelbot.slackbot.server")

SHUTDOWN_TIMEOUT = 10.0  # seconds to let the in-flight event finish


# Global state
config: Optional[KeelBotConfig] = None
slack_handler: Optional[SlackHandler] = None
slack_bot: Optional[SlackBot] = None
inbound: Optional["asyncio.Queue[SlackEvent]"] = None
approvals: Optional[DispatchQueue[ApprovalVote]] = None
commands: Optional[DispatchQueue[BotMessage]] = None
stop_event: Optional[asyncio.Event] = None
bot_task: Optional[asyncio.Task] = None


def _on_bot_task_done(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Slack bot stopped: %s", exc, exc_info=exc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize components on startup"""
    global config, slack_handler, slack_bot, inbound, approvals, commands
    global stop_event, bot_task

    stop_event = None
    bot_task = None

    ensure_directories()
    config = load_config()
    setup_logging(config.log_level)
    logger.info("Starting up (approvals channel: %s)", config.slack.approvals_channel)

    dispatch = config.dispatch
    approvals = DispatchQueue("approvals", dispatch.approvals_queue_size, dispatch.enqueue_timeout)
    commands = DispatchQueue("commands", dispatch.commands_queue_size, dispatch.enqueue_timeout)
    inbound = asyncio.Queue(maxsize=dispatch.inbound_queue_size)
    slack_handler = SlackHandler(signing_secret=config.slack.signing_secret)

    # IdentityNotFoundError aborts startup here
    bots = await configure_bots(config, approvals, commands, default_factories())
    slack_bot = bots.get("slack")

    if slack_bot:
        stop_event = asyncio.Event()
        inbound.put_nowait(SlackEvent(kind=EventKind.CONNECTED))
        bot_task = asyncio.create_task(slack_bot.run(inbound, stop_event))
        bot_task.add_done_callback(_on_bot_task_done)
        logger.info("Ready to receive events")

    yield

    logger.info("Shutting down...")
    if bot_task and stop_event:
        stop_event.set()
        done, _ = await asyncio.wait({bot_task}, timeout=SHUTDOWN_TIMEOUT)
        if not done:
            logger.warning("Slack bot did not stop within %.0fs, cancelling", SHUTDOWN_TIMEOUT)
            bot_task.cancel()


# =============================================================================
# Request Models
# =============================================================================

class Notification(BaseModel):
    """Approval announcement request"""
    title: str
    message: str
    color: str = "good"  # "good", "danger" or a hex code
    fields: List[Dict[str, Any]] = Field(default_factory=list)


app = FastAPI(
    title="Keel Slack Bot",
    description="Deployment approvals and commands over Slack",
    version=__version__,
    lifespan=lifespan
)


def _drain(queue: DispatchQueue, limit: int) -> list:
    items = []
    while len(items) < limit and not queue.empty():
        items.append(queue.get_nowait())
        queue.task_done()
    return items


# =============================================================================
# Endpoints
# =============================================================================

@app.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "keelbot",
        "bot_configured": slack_bot is not None,
        "bot_running": bot_task is not None and not bot_task.done(),
        "bot_name": slack_bot.identity.name if slack_bot else None,
        "approvals_channel": config.slack.approvals_channel if config else None,
    }


@app.get("/stats")
async def stats():
    """Queue and routing statistics"""
    result = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "inbound_pending": inbound.qsize() if inbound else 0,
    }

    for queue in (approvals, commands):
        if queue is not None:
            result[queue.name] = {
                "pending": queue.qsize(),
                "maxsize": queue.maxsize,
                "dropped": queue.dropped,
            }

    if slack_bot:
        result["routes"] = dict(slack_bot.router.stats)

    return result


@app.post("/slack/events")
async def slack_events(
    request: Request,
    x_slack_signature: Optional[str] = Header(None),
    x_slack_request_timestamp: Optional[str] = Header(None)
):
    """
    Handle Slack webhook events.

    Events are acknowledged as soon as they are queued; routing happens in
    the bot task.
    """
    if not slack_handler:
        raise HTTPException(status_code=503, detail="Handler not initialized")

    # Read body
    body = await request.body()

    # Verify signature
    if not slack_handler.verify_signature(
        body,
        x_slack_signature or "",
        x_slack_request_timestamp or ""
    ):
        raise HTTPException(status_code=401, detail="Invalid signature")

    # Parse JSON
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="Invalid JSON")

    # Handle URL verification challenge
    if slack_handler.is_url_verification(data):
        challenge = slack_handler.get_challenge(data)
        return JSONResponse({"challenge": challenge})

    if not slack_bot or inbound is None:
        raise HTTPException(status_code=503, detail="Slack bot not configured")

    # nobody would read the event
    if bot_task is None or bot_task.done():
        raise HTTPException(status_code=503, detail="Slack bot not running")

    event = slack_handler.parse_event(data)
    if event is not None:
        try:
            inbound.put_nowait(event)
        except asyncio.QueueFull:
            # Slack retries non-2xx deliveries
            logger.warning("Inbound queue full, rejecting event")
            raise HTTPException(status_code=503, detail="Busy")

    # Acknowledge receipt
    return JSONResponse({"ok": True})


@app.get("/approvals")
async def get_approvals(limit: int = Query(100, ge=1, le=1000)):
    """Drain pending approval votes"""
    if approvals is None:
        raise HTTPException(status_code=503, detail="Approvals queue not initialized")

    votes = _drain(approvals, limit)
    return {
        "count": len(votes),
        "items": [vote.model_dump(mode="json") for vote in votes],
    }


@app.get("/commands")
async def get_commands(limit: int = Query(100, ge=1, le=1000)):
    """Drain pending bot commands"""
    if commands is None:
        raise HTTPException(status_code=503, detail="Commands queue not initialized")

    messages = _drain(commands, limit)
    return {
        "count": len(messages),
        "items": [message.model_dump(mode="json") for message in messages],
    }


@app.post("/notifications")
async def post_notification(notification: Notification):
    """Post an approval request or status update into the approvals channel"""
    if not slack_bot:
        raise HTTPException(status_code=503, detail="Slack bot not configured")

    ok = await slack_bot.responder.post_message(
        notification.title,
        notification.message,
        notification.color,
        notification.fields,
    )
    if not ok:
        raise HTTPException(status_code=502, detail="Slack rejected the message")

    return {"ok": True, "channel": slack_bot.router.approvals_channel}


# =============================================================================
# CLI Entry Point
# =============================================================================

def run_server():
    """Run the Keel Bot server"""
    import uvicorn

    config = load_config()
    setup_logging(config.log_level)
    port = config.slack.webhook_port

    logger.info("Starting server on port %d", port)
    uvicorn.run(
        "keelbot.slackbot.server:app",
        host="0.0.0.0",
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    run_server()
