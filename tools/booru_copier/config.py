"""Configuration for the copier – boards, retry timing and request settings."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from .models import Dialect

# Matches a domain, ignoring "http"/"https" and a trailing "/"
DOMAIN_RE = re.compile(r"^(?:https?://)?(.+?\..+?)/?$")

API_KEY_LENGTH = 20

# A browser user agent; some boards block default client agents
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:77.0) Gecko/20100101 Firefox/77.0"


def parse_booru_host(value: str) -> str:
    """Return the bare host of a board URL such as ``https://derpibooru.org/``."""
    match = DOMAIN_RE.match(value.strip())
    if not match:
        raise ValueError(f"not a board url: {value!r}")
    return match.group(1)


def parse_api_key(value: str) -> str:
    key = value.strip()
    if len(key) != API_KEY_LENGTH:
        raise ValueError(f"API keys are {API_KEY_LENGTH} characters long")
    return key


@dataclass(frozen=True)
class BooruConfig:
    """One board and the key used to talk to it."""
    host: str
    api_key: str

    @property
    def dialect(self) -> Dialect:
        return Dialect.for_host(self.host)

    @property
    def base_url(self) -> str:
        return f"https://{self.host}"


@dataclass(frozen=True)
class RetryConfig:
    """Exponential backoff timing.  512s at the cap is 17 minutes and 4 seconds."""
    initial_delay: float = 0.25
    max_delay: float = 512.0
    max_attempts_at_max_delay: int = 2


@dataclass(frozen=True)
class CopierConfig:
    per_page: int = 50
    sort_field: str = "created_at"  # stable while new images keep arriving
    sort_direction: str = "asc"
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = 30.0
    retry: RetryConfig = field(default_factory=RetryConfig)
    show_progress: bool = True
