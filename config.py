"""Configuration management for the TrendPilot aggregation pipeline.

This module provides centralized configuration for all pipeline components.
All settings are loaded from environment variables with sensible defaults.
Endpoints and credentials are handed to each source connector at
construction time; nothing is read from the environment after load().

Environment Variables:
    Required:
        OPENROUTER_API_KEY: Key for the chat-completion endpoint

    Completion:
        COMPLETION_BASE_URL: OpenAI-compatible base URL
        COMPLETION_MODEL: Model identifier
        COMPLETION_MAX_TOKENS: Token budget for the response
        COMPLETION_TEMPERATURE: Sampling temperature (low = consistent)
        COMPLETION_TIMEOUT: Request timeout in seconds

    Sources:
        REDDIT_CLIENT_ID / REDDIT_CLIENT_SECRET: Optional OAuth credentials
        REDDIT_USER_AGENT: User-Agent sent to Reddit
        REDDIT_SUBREDDITS: Comma-separated subreddit list
        GITHUB_TOKEN: Optional GitHub token (higher rate limit)
        GITHUB_CREATED_AFTER: Only repositories created after this date
        GITHUB_LOOKBACK_DAYS: Used when GITHUB_CREATED_AFTER is empty
        HN_STORY_LIMIT: Number of Hacker News top stories fetched
        PRODUCTHUNT_TOKEN: Enables the Product Hunt connector when set

    Timeouts:
        FETCH_TIMEOUT: Bulk fetch timeout in seconds
        ITEM_TIMEOUT: Per-story and token-exchange timeout in seconds

    Output:
        DATA_DIR: Directory for the latest-result file and snapshots
        HOST / PORT: Bind address for the HTTP adapter

    Optional Features:
        ENABLE_LOGFIRE: Enable Logfire/OpenTelemetry tracing

    Logging:
        LOG_LEVEL: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_BACKUP_COUNT: Number of rotated log files to keep
        LOG_MAX_BYTES: Max log file size in bytes (0 = time-based rotation)
        LOG_FORMAT: Log format ('text' or 'json' for structured logging)
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path


def _env(key: str, default: str = "") -> str:
    """Get string environment variable with optional default.

    Args:
        key: Environment variable name
        default: Value to return if not set

    Returns:
        Environment variable value or default
    """
    return os.environ.get(key, default)


def _env_int(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name
        default: Value to return if not set

    Returns:
        Parsed integer or default value

    Raises:
        ValueError: If value is set but cannot be parsed as integer
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"Invalid integer value for {key}: '{val}'")


def _env_float(key: str, default: float) -> float:
    """Get float environment variable with default.

    Raises:
        ValueError: If value is set but cannot be parsed as float
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"Invalid float value for {key}: '{val}'")


def _env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable with default.

    Recognizes truthy values: '1', 'true', 'yes', 'on'
    Recognizes falsy values: '0', 'false', 'no', 'off'
    """
    val = os.environ.get(key, "").lower()
    if val in ("1", "true", "yes", "on"):
        return True
    if val in ("0", "false", "no", "off"):
        return False
    return default


def _env_list(key: str, default: list[str]) -> list[str]:
    """Get comma-separated list environment variable with default."""
    val = os.environ.get(key)
    if not val:
        return list(default)
    return [part.strip() for part in val.split(",") if part.strip()]


DEFAULT_SUBREDDITS = ["startups", "technology", "ArtificialIntelligence"]

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass
class Config:
    """Application configuration loaded from environment variables.

    All settings can be overridden via environment variables. Use Config.load()
    to create an instance with values from the environment.

    Example:
        >>> config = Config.load()
        >>> if error := config.validate():
        ...     print(f"Config error: {error}")
    """

    # === Required ===
    completion_api_key: str = ""  # OPENROUTER_API_KEY

    # === Completion Endpoint ===
    completion_base_url: str = "https://openrouter.ai/api/v1"
    completion_model: str = "alibaba/tongyi-deepresearch-30b-a3b:free"
    completion_max_tokens: int = 2000
    completion_temperature: float = 0.3
    completion_timeout: float = 30.0
    completion_referer: str = "https://trendpilot.app"  # OpenRouter attribution
    completion_title: str = "TrendPilot"

    # === Reddit ===
    reddit_client_id: str = ""
    reddit_client_secret: str = ""
    reddit_user_agent: str = "TrendPilot/1.0"
    reddit_subreddits: list[str] = field(default_factory=lambda: DEFAULT_SUBREDDITS.copy())
    reddit_limit: int = 25
    reddit_public_url: str = "https://www.reddit.com/r/{subreddits}/top.json"
    reddit_oauth_url: str = "https://oauth.reddit.com/r/{subreddits}/top"
    reddit_token_url: str = "https://www.reddit.com/api/v1/access_token"

    # === GitHub ===
    github_token: str = ""
    github_search_url: str = "https://api.github.com/search/repositories"
    github_created_after: str = ""  # YYYY-MM-DD, empty = lookback window
    github_lookback_days: int = 30
    github_per_page: int = 20

    # === Hacker News ===
    hn_top_stories_url: str = "https://hacker-news.firebaseio.com/v0/topstories.json"
    hn_item_url: str = "https://hacker-news.firebaseio.com/v0/item/{id}.json"
    hn_story_limit: int = 30

    # === Product Hunt (optional) ===
    producthunt_token: str = ""
    producthunt_url: str = "https://api.producthunt.com/v2/api/graphql"
    producthunt_limit: int = 20

    # === Timeouts (seconds) ===
    fetch_timeout: float = 10.0  # Bulk fetches
    item_timeout: float = 5.0  # Per-story fetches, token exchange

    # === Output ===
    data_dir: Path = field(default_factory=lambda: Path("data"))  # DATA_DIR
    host: str = "0.0.0.0"
    port: int = 3001

    # === Logging Configuration ===
    log_dir: Path = field(default_factory=lambda: Path("log"))  # LOG_DIR
    log_level: str = "INFO"
    log_backup_count: int = 30
    log_max_bytes: int = 0  # 0 = time-based rotation
    log_format: str = "text"  # 'text' or 'json'

    # === Optional: Observability ===
    enable_logfire: bool = False
    logfire_token: str = ""

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment variables."""
        defaults = cls()
        return cls(
            completion_api_key=_env("OPENROUTER_API_KEY"),
            completion_base_url=_env("COMPLETION_BASE_URL", defaults.completion_base_url),
            completion_model=_env("COMPLETION_MODEL", defaults.completion_model),
            completion_max_tokens=_env_int("COMPLETION_MAX_TOKENS", defaults.completion_max_tokens),
            completion_temperature=_env_float("COMPLETION_TEMPERATURE", defaults.completion_temperature),
            completion_timeout=_env_float("COMPLETION_TIMEOUT", defaults.completion_timeout),
            completion_referer=_env("COMPLETION_REFERER", defaults.completion_referer),
            completion_title=_env("COMPLETION_TITLE", defaults.completion_title),
            reddit_client_id=_env("REDDIT_CLIENT_ID"),
            reddit_client_secret=_env("REDDIT_CLIENT_SECRET"),
            reddit_user_agent=_env("REDDIT_USER_AGENT", defaults.reddit_user_agent),
            reddit_subreddits=_env_list("REDDIT_SUBREDDITS", DEFAULT_SUBREDDITS),
            reddit_limit=_env_int("REDDIT_LIMIT", defaults.reddit_limit),
            reddit_public_url=_env("REDDIT_PUBLIC_URL", defaults.reddit_public_url),
            reddit_oauth_url=_env("REDDIT_OAUTH_URL", defaults.reddit_oauth_url),
            reddit_token_url=_env("REDDIT_TOKEN_URL", defaults.reddit_token_url),
            github_token=_env("GITHUB_TOKEN"),
            github_search_url=_env("GITHUB_SEARCH_URL", defaults.github_search_url),
            github_created_after=_env("GITHUB_CREATED_AFTER"),
            github_lookback_days=_env_int("GITHUB_LOOKBACK_DAYS", defaults.github_lookback_days),
            github_per_page=_env_int("GITHUB_PER_PAGE", defaults.github_per_page),
            hn_top_stories_url=_env("HN_TOP_STORIES_URL", defaults.hn_top_stories_url),
            hn_item_url=_env("HN_ITEM_URL", defaults.hn_item_url),
            hn_story_limit=_env_int("HN_STORY_LIMIT", defaults.hn_story_limit),
            producthunt_token=_env("PRODUCTHUNT_TOKEN"),
            producthunt_url=_env("PRODUCTHUNT_URL", defaults.producthunt_url),
            producthunt_limit=_env_int("PRODUCTHUNT_LIMIT", defaults.producthunt_limit),
            fetch_timeout=_env_float("FETCH_TIMEOUT", defaults.fetch_timeout),
            item_timeout=_env_float("ITEM_TIMEOUT", defaults.item_timeout),
            data_dir=Path(_env("DATA_DIR", "data")),
            host=_env("HOST", defaults.host),
            port=_env_int("PORT", defaults.port),
            log_dir=Path(_env("LOG_DIR", "log")),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            log_backup_count=_env_int("LOG_BACKUP_COUNT", 30),
            log_max_bytes=_env_int("LOG_MAX_BYTES", 0),
            log_format=_env("LOG_FORMAT", "text").lower(),
            enable_logfire=_env_bool("ENABLE_LOGFIRE", False),
            logfire_token=_env("LOGFIRE_TOKEN"),
        )

    @property
    def reddit_oauth_enabled(self) -> bool:
        """True when both Reddit OAuth credentials are configured."""
        return bool(self.reddit_client_id and self.reddit_client_secret)

    @property
    def producthunt_enabled(self) -> bool:
        """Product Hunt is auxiliary and only queried with a token."""
        return bool(self.producthunt_token)

    def validate(self) -> str | None:
        """Validate configuration for required fields and valid values.

        Checks:
            - OPENROUTER_API_KEY is set
            - Numeric limits and timeouts are positive
            - GITHUB_CREATED_AFTER is empty or YYYY-MM-DD
            - Log level and format are recognized

        Returns:
            Error message string if invalid, None if valid.
        """
        if not self.completion_api_key:
            return "OPENROUTER_API_KEY environment variable is required"
        if not self.reddit_subreddits:
            return "No subreddits configured"
        if self.completion_max_tokens <= 0:
            return "COMPLETION_MAX_TOKENS must be positive"
        if not 0.0 <= self.completion_temperature <= 2.0:
            return "COMPLETION_TEMPERATURE must be between 0 and 2"
        if min(self.completion_timeout, self.fetch_timeout, self.item_timeout) <= 0:
            return "Timeouts must be positive"
        if min(self.reddit_limit, self.github_per_page, self.hn_story_limit, self.producthunt_limit) <= 0:
            return "Source limits must be positive"
        if self.github_lookback_days <= 0:
            return "GITHUB_LOOKBACK_DAYS must be positive"
        if self.github_created_after and not _DATE_PATTERN.match(self.github_created_after):
            return f"Invalid GITHUB_CREATED_AFTER '{self.github_created_after}' - must be YYYY-MM-DD"
        if not 0 < self.port < 65536:
            return f"Invalid PORT {self.port}"
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return f"Invalid LOG_LEVEL '{self.log_level}' - must be DEBUG, INFO, WARNING, ERROR, or CRITICAL"
        if self.log_format not in ("text", "json"):
            return f"Invalid LOG_FORMAT '{self.log_format}' - must be 'text' or 'json'"
        if self.log_backup_count < 0:
            return "LOG_BACKUP_COUNT must be non-negative"
        if self.log_max_bytes < 0:
            return "LOG_MAX_BYTES must be non-negative"
        return None
