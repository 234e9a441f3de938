"""
Configuration Management for Keel Bot

Loads configuration from ~/.keelbot/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field

logger = logging.getLogger("keelbot.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".keelbot"
CONFIG_PATH = CONFIG_DIR / "config.json"
LOGS_DIR = CONFIG_DIR / "logs"

DEFAULT_BOT_NAME = "keel"
DEFAULT_APPROVALS_CHANNEL = "general"


def normalize_channel_name(name: str) -> str:
    """Strip the leading channel marker ("#general" -> "general")"""
    if name.startswith("#"):
        return name[1:]
    return name


@dataclass
class SlackConfig:
    """Slack workspace configuration"""
    token: str = ""
    bot_name: str = DEFAULT_BOT_NAME
    approvals_channel: str = DEFAULT_APPROVALS_CHANNEL
    signing_secret: str = ""
    webhook_port: int = 8080

    @property
    def is_configured(self) -> bool:
        return bool(self.token)


@dataclass
class DispatchConfig:
    """Queue sizes and timeouts of the event dispatch pipeline"""
    approvals_queue_size: int = 100
    commands_queue_size: int = 100
    inbound_queue_size: int = 1000
    enqueue_timeout: float = 5.0  # seconds to wait on a full output queue
    lookup_timeout: float = 5.0  # seconds per channel lookup


@dataclass
class KeelBotConfig:
    """Main Keel Bot configuration"""
    slack: SlackConfig = field(default_factory=SlackConfig)
    dispatch: DispatchConfig = field(default_factory=DispatchConfig)
    log_level: str = "INFO"


def _parse_slack_config(data: dict) -> SlackConfig:
    """Parse slack section from config dict"""
    slack_data = data.get("slack", {})
    return SlackConfig(
        token=slack_data.get("token", ""),
        bot_name=slack_data.get("bot_name") or DEFAULT_BOT_NAME,
        approvals_channel=normalize_channel_name(
            slack_data.get("approvals_channel") or DEFAULT_APPROVALS_CHANNEL
        ),
        signing_secret=slack_data.get("signing_secret", ""),
        webhook_port=slack_data.get("webhook_port", 8080),
    )


def _parse_dispatch_config(data: dict) -> DispatchConfig:
    """Parse dispatch section from config dict"""
    dispatch_data = data.get("dispatch", {})
    return DispatchConfig(
        approvals_queue_size=dispatch_data.get("approvals_queue_size", 100),
        commands_queue_size=dispatch_data.get("commands_queue_size", 100),
        inbound_queue_size=dispatch_data.get("inbound_queue_size", 1000),
        enqueue_timeout=dispatch_data.get("enqueue_timeout", 5.0),
        lookup_timeout=dispatch_data.get("lookup_timeout", 5.0),
    )


def load_config() -> KeelBotConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (~/.keelbot/config.json)
    3. Default values
    """
    config = KeelBotConfig()

    # Load from config file if exists
    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            config.slack = _parse_slack_config(data)
            config.dispatch = _parse_dispatch_config(data)
            config.log_level = data.get("log_level", "INFO")
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load config file %s: %s", CONFIG_PATH, e)

    # Environment variable overrides
    if os.getenv("SLACK_TOKEN"):
        config.slack.token = os.getenv("SLACK_TOKEN")
    if os.getenv("SLACK_BOT_NAME"):
        config.slack.bot_name = os.getenv("SLACK_BOT_NAME")
    if os.getenv("SLACK_APPROVALS_CHANNEL"):
        config.slack.approvals_channel = normalize_channel_name(
            os.getenv("SLACK_APPROVALS_CHANNEL")
        )
    if os.getenv("SLACK_SIGNING_SECRET"):
        config.slack.signing_secret = os.getenv("SLACK_SIGNING_SECRET")
    if os.getenv("KEELBOT_PORT"):
        config.slack.webhook_port = int(os.getenv("KEELBOT_PORT"))

    if os.getenv("KEELBOT_ENQUEUE_TIMEOUT"):
        config.dispatch.enqueue_timeout = float(os.getenv("KEELBOT_ENQUEUE_TIMEOUT"))
    if os.getenv("KEELBOT_LOOKUP_TIMEOUT"):
        config.dispatch.lookup_timeout = float(os.getenv("KEELBOT_LOOKUP_TIMEOUT"))

    if os.getenv("KEELBOT_LOG_LEVEL"):
        config.log_level = os.getenv("KEELBOT_LOG_LEVEL")

    return config


def ensure_directories() -> None:
    """Ensure required directories exist"""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
