"""TOML configuration loader for the receipt scanner."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

DEFAULT_DB_PATH = "~/.config/grocery-scanner/receipts.db"


@dataclass
class OpenAIVisionConfig:
    api_key: str = ""
    model: str = "gpt-4o-mini"


@dataclass
class GeminiVisionConfig:
    api_key: str = ""
    model: str = "gemini-1.5-flash"


@dataclass
class ClaudeVisionConfig:
    api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"


@dataclass
class VisionConfig:
    backend: str = "openai"
    max_tokens: int = 2000
    timeout_ms: int = 30000
    allow_placeholder_on_quota_error: bool = False
    openai: OpenAIVisionConfig = field(default_factory=OpenAIVisionConfig)
    gemini: GeminiVisionConfig = field(default_factory=GeminiVisionConfig)
    claude: ClaudeVisionConfig = field(default_factory=ClaudeVisionConfig)

    @property
    def api_key(self) -> str:
        """API key of the selected backend."""
        provider = getattr(self, self.backend, None)
        return getattr(provider, "api_key", "")


@dataclass
class DatabaseConfig:
    path: str = DEFAULT_DB_PATH


@dataclass
class ScannerConfig:
    vision: VisionConfig = field(default_factory=VisionConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


def load_config(path: str | Path | None = None) -> ScannerConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    API keys can be overridden via environment variables.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    vis = raw.get("vision", {})
    dbs = raw.get("database", {})

    openai_cfg = vis.get("openai", {})
    gemini_cfg = vis.get("gemini", {})
    claude_cfg = vis.get("claude", {})

    # Resolve API keys: config file → environment variable
    openai_api_key = openai_cfg.get("api_key", "") or os.environ.get(
        "OPENAI_API_KEY", ""
    )
    gemini_api_key = gemini_cfg.get("api_key", "") or os.environ.get(
        "GEMINI_API_KEY", ""
    )
    claude_api_key = claude_cfg.get("api_key", "") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )

    return ScannerConfig(
        vision=VisionConfig(
            backend=vis.get("backend", "openai"),
            max_tokens=vis.get("max_tokens", 2000),
            timeout_ms=vis.get("timeout_ms", 30000),
            allow_placeholder_on_quota_error=vis.get(
                "allow_placeholder_on_quota_error", False
            ),
            openai=OpenAIVisionConfig(
                api_key=openai_api_key,
                model=openai_cfg.get("model", "gpt-4o-mini"),
            ),
            gemini=GeminiVisionConfig(
                api_key=gemini_api_key,
                model=gemini_cfg.get("model", "gemini-1.5-flash"),
            ),
            claude=ClaudeVisionConfig(
                api_key=claude_api_key,
                model=claude_cfg.get("model", "claude-sonnet-4-5-20250929"),
            ),
        ),
        database=DatabaseConfig(
            path=dbs.get("path", DEFAULT_DB_PATH),
        ),
    )
