"""chatrelay configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site — not in this module)
  2. Environment variables  (CHATRELAY_COMPLETION_MODEL, CHATRELAY_EMBEDDING_MODEL,
                             CHATRELAY_STORAGE_PATH, CHATRELAY_LOG_LEVEL)
  3. Per-project chatrelay.yaml  (working directory)
  4. Global ~/.chatrelay/config.yaml  (defaults only — no API keys)
  5. Hardcoded defaults

The vendor API key is only ever read from the environment variable named by
``vendor.api_key_env``; config files must never contain credentials.
All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".chatrelay"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "chatrelay.yaml"

# Matches api_key, apikey, api-key, api_secret, *_token, token, *_secret,
# secret, password, passwd, credential(s). ``api_key_env`` is allowed: it names
# an environment variable, it does not hold a key.
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)(?!_env$)"
    r"|_token$"
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_KNOWN_SECTIONS: frozenset[str] = frozenset(
    [
        "vendor",
        "completion",
        "embedding",
        "image",
        "speech",
        "browse",
        "server",
        "storage",
        "logging",
    ]
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid or forbidden value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class VendorCfg:
    """Vendor credential lookup (chatrelay.yaml: vendor:)."""

    api_key_env: str = "OPENAI_API_KEY"


@dataclass
class CompletionCfg:
    """Chat completion defaults (chatrelay.yaml: completion:)."""

    default_model: str = "gpt-4o"
    temperature: float = 0.7
    max_tokens: int = 2048


@dataclass
class EmbeddingCfg:
    """Embedding request configuration (chatrelay.yaml: embedding:).

    Attributes:
        model: Vendor embedding model.
        max_chars: Hard character cut applied before the text is sent.
    """

    model: str = "text-embedding-3-small"
    max_chars: int = 8_000


@dataclass
class ImageCfg:
    """Image generation / edit defaults (chatrelay.yaml: image:)."""

    generation_model: str = "dall-e-3"
    edit_model: str = "dall-e-2"
    size: str = "1024x1024"
    quality: str = "standard"
    style: str = "natural"


@dataclass
class SpeechCfg:
    """Speech-to-text and text-to-speech defaults (chatrelay.yaml: speech:)."""

    transcription_model: str = "whisper-1"
    tts_model: str = "tts-1"
    voice: str = "alloy"


@dataclass
class BrowseCfg:
    """Web browsing configuration (chatrelay.yaml: browse:)."""

    summary_model: str = "gpt-4-turbo"
    max_urls: int = 3
    timeout: int = 10
    content_chars: int = 2_000


@dataclass
class ServerCfg:
    """HTTP server configuration (chatrelay.yaml: server:)."""

    host: str = "127.0.0.1"
    port: int = 3000
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])


@dataclass
class StorageCfg:
    """Session state persistence (chatrelay.yaml: storage:).

    Attributes:
        path: SQLite file holding session state. ``None`` keeps state in memory.
    """

    path: str | None = ".chatrelay.db"


@dataclass
class LoggingCfg:
    """Logging configuration (chatrelay.yaml: logging:)."""

    level: str = "INFO"
    file: str | None = None


@dataclass
class RelayConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    vendor: VendorCfg = field(default_factory=VendorCfg)
    completion: CompletionCfg = field(default_factory=CompletionCfg)
    embedding: EmbeddingCfg = field(default_factory=EmbeddingCfg)
    image: ImageCfg = field(default_factory=ImageCfg)
    speech: SpeechCfg = field(default_factory=SpeechCfg)
    browse: BrowseCfg = field(default_factory=BrowseCfg)
    server: ServerCfg = field(default_factory=ServerCfg)
    storage: StorageCfg = field(default_factory=StorageCfg)
    logging: LoggingCfg = field(default_factory=LoggingCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any API-key-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Config '{source}' contains a forbidden key '{full}'.\n"
                        f"  API keys must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export OPENAI_API_KEY=<value>"
                    )
                _scan(v, full)

    _scan(data, "")


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _cfg_from_dict(data: dict[str, Any]) -> RelayConfig:
    """Build a *RelayConfig* from a merged raw YAML dict."""
    cfg = RelayConfig()

    if "vendor" in data:
        v = data["vendor"]
        cfg.vendor = VendorCfg(api_key_env=str(v.get("api_key_env", cfg.vendor.api_key_env)))

    if "completion" in data:
        c = data["completion"]
        cfg.completion = CompletionCfg(
            default_model=str(c.get("default_model", cfg.completion.default_model)),
            temperature=float(c.get("temperature", cfg.completion.temperature)),
            max_tokens=int(c.get("max_tokens", cfg.completion.max_tokens)),
        )

    if "embedding" in data:
        e = data["embedding"]
        cfg.embedding = EmbeddingCfg(
            model=str(e.get("model", cfg.embedding.model)),
            max_chars=int(e.get("max_chars", cfg.embedding.max_chars)),
        )

    if "image" in data:
        i = data["image"]
        cfg.image = ImageCfg(
            generation_model=str(i.get("generation_model", cfg.image.generation_model)),
            edit_model=str(i.get("edit_model", cfg.image.edit_model)),
            size=str(i.get("size", cfg.image.size)),
            quality=str(i.get("quality", cfg.image.quality)),
            style=str(i.get("style", cfg.image.style)),
        )

    if "speech" in data:
        s = data["speech"]
        cfg.speech = SpeechCfg(
            transcription_model=str(
                s.get("transcription_model", cfg.speech.transcription_model)
            ),
            tts_model=str(s.get("tts_model", cfg.speech.tts_model)),
            voice=str(s.get("voice", cfg.speech.voice)),
        )

    if "browse" in data:
        b = data["browse"]
        cfg.browse = BrowseCfg(
            summary_model=str(b.get("summary_model", cfg.browse.summary_model)),
            max_urls=int(b.get("max_urls", cfg.browse.max_urls)),
            timeout=int(b.get("timeout", cfg.browse.timeout)),
            content_chars=int(b.get("content_chars", cfg.browse.content_chars)),
        )

    if "server" in data:
        sv = data["server"]
        cfg.server = ServerCfg(
            host=str(sv.get("host", cfg.server.host)),
            port=int(sv.get("port", cfg.server.port)),
            cors_origins=[str(o) for o in sv.get("cors_origins", cfg.server.cors_origins)],
        )

    if "storage" in data:
        st = data["storage"]
        path = st.get("path", cfg.storage.path)
        cfg.storage = StorageCfg(path=str(path) if path else None)

    if "logging" in data:
        lg = data["logging"]
        cfg.logging = LoggingCfg(
            level=str(lg.get("level", cfg.logging.level)),
            file=lg.get("file") or cfg.logging.file,
        )

    return cfg


def _apply_env_overrides(cfg: RelayConfig) -> RelayConfig:
    """Apply CHATRELAY_* environment variable overrides."""
    if model := os.environ.get("CHATRELAY_COMPLETION_MODEL"):
        cfg.completion.default_model = model
    if model := os.environ.get("CHATRELAY_EMBEDDING_MODEL"):
        cfg.embedding.model = model
    if path := os.environ.get("CHATRELAY_STORAGE_PATH"):
        cfg.storage.path = path
    if level := os.environ.get("CHATRELAY_LOG_LEVEL"):
        cfg.logging.level = level
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> RelayConfig:
    """Load and return a merged *RelayConfig*.

    Applies layers in order: global → per-project → env vars.

    Args:
        project_dir: Directory to search for *chatrelay.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ConfigError: If either config file contains API-key-like fields.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    if global_path.exists():
        raw_global = yaml.safe_load(global_path.read_text(encoding="utf-8")) or {}
        _check_no_api_keys(raw_global, global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = yaml.safe_load(project_cfg_path.read_text(encoding="utf-8")) or {}
        _check_no_api_keys(raw_project, project_cfg_path)
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _cfg_from_dict(merged)
    return _apply_env_overrides(cfg)
