"""Consumer credential configuration loader"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from .core.exceptions import ConfigError
from .core.types import FacebookConsumer, TwitterConsumer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SocialAuthConfig:
    """Consumer credentials per provider, None when not configured"""

    facebook: FacebookConsumer | None = None
    twitter: TwitterConsumer | None = None


def parse_config(config: dict) -> SocialAuthConfig:
    """Build SocialAuthConfig from the loaded config dict

    Args:
        config: Dict with a "providers" section holding "facebook" and "twitter"

    Returns:
        SocialAuthConfig, providers with incomplete sections are left as None
    """
    providers = config.get("providers", {}) or {}

    facebook = None
    facebook_config = providers.get("facebook", {}) or {}
    app_id = facebook_config.get("app_id")
    if app_id:
        facebook = FacebookConsumer(app_id=str(app_id))
    elif facebook_config:
        logger.warning("Facebook config found but app_id is missing")

    twitter = None
    twitter_config = providers.get("twitter", {}) or {}
    key = twitter_config.get("consumer_key")
    secret = twitter_config.get("consumer_secret")
    if key and secret:
        twitter = TwitterConsumer(key=str(key), secret=str(secret))
    elif twitter_config:
        logger.warning("Twitter config needs both consumer_key and consumer_secret")

    return SocialAuthConfig(facebook=facebook, twitter=twitter)


def load_config(config_path: str | Path = "config.json") -> SocialAuthConfig:
    """Load consumer credentials from a JSON config file

    Args:
        config_path: Path to config.json

    Returns:
        SocialAuthConfig instance
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file is not valid JSON: {config_path}: {e}")

    if not isinstance(config, dict):
        raise ConfigError(f"Config file must contain a JSON object: {config_path}")

    result = parse_config(config)
    logger.info(
        f"Loaded social auth config (facebook: {result.facebook is not None}, "
        f"twitter: {result.twitter is not None})"
    )
    return result
