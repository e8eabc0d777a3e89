"""docinsight configuration loader.

Priority (high → low):
  1. CLI flags              (handled at call site — not in this module)
  2. Environment variables  (DOCINSIGHT_GENERATION_MODEL, DOCINSIGHT_EMBEDDING_MODEL,
                             DOCINSIGHT_UPLOAD_DIR, DOCINSIGHT_DB, DOCINSIGHT_LOG_LEVEL)
  3. Per-project docinsight.yaml
  4. Global ~/.docinsight/config.yaml  (defaults only — no API keys)
  5. Hardcoded defaults

Global config must never contain API keys; use environment variables instead.
All YAML reads use yaml.safe_load().
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

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".docinsight"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "docinsight.yaml"

# Matches api_key, apikey, api-key, api_secret, *_token, token, *_secret,
# secret, password, passwd, credential(s). Leaves max_tokens, top_k alone.
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"
    r"|_token$"
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_KNOWN_SECTIONS: frozenset[str] = frozenset(
    ["storage", "embedding", "generation", "retrieval", "chunking", "conversations", "logging"]
)

_LOG_LEVELS: frozenset[str] = frozenset(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid or forbidden value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class StorageCfg:
    """Where uploads and the database live (docinsight.yaml: storage:)."""

    upload_dir: str = "uploads"
    db: str = ".docinsight.db"


@dataclass
class EmbeddingCfg:
    """Embedding model configuration (docinsight.yaml: embedding:)."""

    model: str = "openai/text-embedding-3-small"
    num_retries: int = 3


@dataclass
class GenerationCfg:
    """LLM generation configuration (docinsight.yaml: generation:)."""

    model: str = "openai/gpt-4o-mini"
    max_tokens: int = 1024
    temperature: float = 0.2


@dataclass
class RetrievalCfg:
    """Retrieval configuration (docinsight.yaml: retrieval:).

    Attributes:
        top_k: Chunks retrieved for user-wide questions.
        stream_top_k: Chunks retrieved for single-document streaming answers.
    """

    top_k: int = 5
    stream_top_k: int = 5


@dataclass
class ChunkingCfg:
    """Chunk window and overlap, in characters (docinsight.yaml: chunking:)."""

    chunk_size: int = 2000
    overlap: int = 200


@dataclass
class ConversationsCfg:
    """Conversation retention (docinsight.yaml: conversations:)."""

    retention_hours: int = 24


@dataclass
class LoggingCfg:
    """structlog output (docinsight.yaml: logging:)."""

    level: str = "INFO"
    json: bool = False


@dataclass
class DocInsightConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    storage: StorageCfg = field(default_factory=StorageCfg)
    embedding: EmbeddingCfg = field(default_factory=EmbeddingCfg)
    generation: GenerationCfg = field(default_factory=GenerationCfg)
    retrieval: RetrievalCfg = field(default_factory=RetrievalCfg)
    chunking: ChunkingCfg = field(default_factory=ChunkingCfg)
    conversations: ConversationsCfg = field(default_factory=ConversationsCfg)
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
                        f"Global config '{source}' contains a forbidden key '{full}'.\n"
                        f"  API keys must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export {str(k).upper().replace('-', '_')}=<value>"
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


def _validate(cfg: DocInsightConfig) -> None:
    """Raise ConfigError for values the core cannot run with."""
    if cfg.chunking.chunk_size < 1:
        raise ConfigError(f"chunking.chunk_size must be >= 1, got {cfg.chunking.chunk_size}")
    if not 0 <= cfg.chunking.overlap < cfg.chunking.chunk_size:
        raise ConfigError(
            "chunking.overlap must be >= 0 and smaller than chunking.chunk_size, "
            f"got overlap={cfg.chunking.overlap} chunk_size={cfg.chunking.chunk_size}"
        )
    if cfg.retrieval.top_k < 1 or cfg.retrieval.stream_top_k < 1:
        raise ConfigError("retrieval.top_k and retrieval.stream_top_k must be >= 1")
    if cfg.conversations.retention_hours < 1:
        raise ConfigError(
            f"conversations.retention_hours must be >= 1, got {cfg.conversations.retention_hours}"
        )
    if cfg.logging.level.upper() not in _LOG_LEVELS:
        raise ConfigError(
            f"logging.level must be one of {sorted(_LOG_LEVELS)}, got '{cfg.logging.level}'"
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


def _cfg_from_dict(data: dict[str, Any]) -> DocInsightConfig:
    """Build a *DocInsightConfig* from a merged raw YAML dict."""
    cfg = DocInsightConfig()

    try:
        if "storage" in data:
            s = data["storage"]
            cfg.storage = StorageCfg(
                upload_dir=str(s.get("upload_dir", cfg.storage.upload_dir)),
                db=str(s.get("db", cfg.storage.db)),
            )

        if "embedding" in data:
            e = data["embedding"]
            cfg.embedding = EmbeddingCfg(
                model=str(e.get("model", cfg.embedding.model)),
                num_retries=int(e.get("num_retries", cfg.embedding.num_retries)),
            )

        if "generation" in data:
            g = data["generation"]
            cfg.generation = GenerationCfg(
                model=str(g.get("model", cfg.generation.model)),
                max_tokens=int(g.get("max_tokens", cfg.generation.max_tokens)),
                temperature=float(g.get("temperature", cfg.generation.temperature)),
            )

        if "retrieval" in data:
            r = data["retrieval"]
            cfg.retrieval = RetrievalCfg(
                top_k=int(r.get("top_k", cfg.retrieval.top_k)),
                stream_top_k=int(r.get("stream_top_k", cfg.retrieval.stream_top_k)),
            )

        if "chunking" in data:
            c = data["chunking"]
            cfg.chunking = ChunkingCfg(
                chunk_size=int(c.get("chunk_size", cfg.chunking.chunk_size)),
                overlap=int(c.get("overlap", cfg.chunking.overlap)),
            )

        if "conversations" in data:
            cv = data["conversations"]
            cfg.conversations = ConversationsCfg(
                retention_hours=int(
                    cv.get("retention_hours", cfg.conversations.retention_hours)
                ),
            )

        if "logging" in data:
            lg = data["logging"]
            cfg.logging = LoggingCfg(
                level=str(lg.get("level", cfg.logging.level)).upper(),
                json=bool(lg.get("json", cfg.logging.json)),
            )
    except (TypeError, ValueError, AttributeError) as exc:
        raise ConfigError(f"Invalid configuration value: {exc}") from exc

    return cfg


def _apply_env_overrides(cfg: DocInsightConfig) -> DocInsightConfig:
    """Apply DOCINSIGHT_* environment variable overrides (layer 2)."""
    if model := os.environ.get("DOCINSIGHT_GENERATION_MODEL"):
        cfg.generation.model = model
    if model := os.environ.get("DOCINSIGHT_EMBEDDING_MODEL"):
        cfg.embedding.model = model
    if upload_dir := os.environ.get("DOCINSIGHT_UPLOAD_DIR"):
        cfg.storage.upload_dir = upload_dir
    if db := os.environ.get("DOCINSIGHT_DB"):
        cfg.storage.db = db
    if level := os.environ.get("DOCINSIGHT_LOG_LEVEL"):
        cfg.logging.level = level.upper()
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> DocInsightConfig:
    """Load and return a merged *DocInsightConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *docinsight.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ConfigError: If global config contains API-key-like fields, or any
            value is malformed or out of range.
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
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _apply_env_overrides(_cfg_from_dict(merged))
    _validate(cfg)
    return cfg


def write_project_config(project_dir: Path, cfg: DocInsightConfig | None = None) -> Path:
    """Write a commented *docinsight.yaml* into *project_dir* (never overwrites).

    Returns:
        Path to the project config file.
    """
    cfg = cfg or DocInsightConfig()
    target = project_dir / _PROJECT_CONFIG_NAME
    if target.exists():
        return target

    content = (
        "# docinsight project configuration.\n"
        "# NEVER store API keys here — use environment variables:\n"
        "#   export OPENAI_API_KEY=sk-...\n"
        "\n"
        "storage:\n"
        f"  upload_dir: {cfg.storage.upload_dir}\n"
        f"  db: {cfg.storage.db}\n"
        "\n"
        "embedding:\n"
        f"  model: {cfg.embedding.model}\n"
        "\n"
        "generation:\n"
        f"  model: {cfg.generation.model}\n"
        "\n"
        "retrieval:\n"
        f"  top_k: {cfg.retrieval.top_k}\n"
        "\n"
        "chunking:\n"
        f"  chunk_size: {cfg.chunking.chunk_size}\n"
        f"  overlap: {cfg.chunking.overlap}\n"
        "\n"
        "conversations:\n"
        f"  retention_hours: {cfg.conversations.retention_hours}\n"
    )
    target.write_text(content, encoding="utf-8")
    return target
