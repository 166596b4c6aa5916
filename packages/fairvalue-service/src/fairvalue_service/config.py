"""
Service configuration.

``Settings`` is a frozen dataclass read from environment variables by
``Settings.from_env()``.  ``validate()`` raises ``ValueError`` on bad values.

Environment variables
---------------------
ANTHROPIC_API_KEY          API key for the Claude web-search connector.
FAIRVALUE_MODEL            Model identifier used for data acquisition.
FAIRVALUE_MAX_TOKENS       Response token ceiling for one acquisition call.
FAIRVALUE_TIMEOUT          Provider request timeout, in seconds.
FAIRVALUE_MAX_SEARCHES     Web searches the model may run per lookup.
FAIRVALUE_DEFAULT_SOURCE   Connector used when a request does not name one.
FAIRVALUE_LOG_LEVEL        Root logging level.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 4096
DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_SEARCHES = 5
DEFAULT_SOURCE = "claude"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    anthropic_api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    timeout: float = DEFAULT_TIMEOUT
    max_searches: int = DEFAULT_MAX_SEARCHES
    default_source: str = DEFAULT_SOURCE
    log_level: str = DEFAULT_LOG_LEVEL

    def validate(self) -> None:
        if not self.model:
            raise ValueError("model must not be empty")
        if self.max_tokens < 1:
            raise ValueError(f"max_tokens must be >= 1, got {self.max_tokens}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {self.timeout}")
        if self.max_searches < 1:
            raise ValueError(f"max_searches must be >= 1, got {self.max_searches}")
        if not self.default_source:
            raise ValueError("default_source must not be empty")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"unknown log_level {self.log_level!r}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        try:
            settings = cls(
                anthropic_api_key=env.get("ANTHROPIC_API_KEY") or None,
                model=env.get("FAIRVALUE_MODEL", DEFAULT_MODEL),
                max_tokens=int(env.get("FAIRVALUE_MAX_TOKENS", DEFAULT_MAX_TOKENS)),
                timeout=float(env.get("FAIRVALUE_TIMEOUT", DEFAULT_TIMEOUT)),
                max_searches=int(env.get("FAIRVALUE_MAX_SEARCHES", DEFAULT_MAX_SEARCHES)),
                default_source=env.get("FAIRVALUE_DEFAULT_SOURCE", DEFAULT_SOURCE),
                log_level=env.get("FAIRVALUE_LOG_LEVEL", DEFAULT_LOG_LEVEL),
            )
        except ValueError as e:
            raise ValueError(f"Invalid FairValue configuration: {e}") from e
        settings.validate()
        return settings
