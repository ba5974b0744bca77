"""
Source Registry Module
======================

Named ingestion sources and run settings, read from ``config/sources.yaml``.

A source is a list of CSV files holding quote records. The ``global`` block
sets the run limit and the validation thresholds shared by every source.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from quote_catalog.ingestion.permalink import AUTHOR_PERMALINK_WORDS, QUOTE_PERMALINK_WORDS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "sources.yaml"


@dataclass
class IngestionConfig:
    """Run limit and record validation thresholds."""

    seed_limit: int | None = None
    max_author_length: int = 500
    min_quote_length: int = 10
    author_permalink_words: int = AUTHOR_PERMALINK_WORDS
    quote_permalink_words: int = QUOTE_PERMALINK_WORDS

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> IngestionConfig:
        """Build from the ``global`` block; unknown keys are ignored."""
        values = {}
        for f in fields(cls):
            raw = (data or {}).get(f.name)
            if raw is None:
                continue
            if f.name == "seed_limit":
                # 0 or blank means "no limit"
                values[f.name] = int(raw) or None
            else:
                values[f.name] = int(raw)
        return cls(**values)

    def with_env_overrides(self) -> IngestionConfig:
        """
        Return a copy with SEED_LIMIT applied, or self when it is unset.

        SEED_LIMIT=0 means "no limit", as in the YAML file. A value that is
        not an integer is logged and ignored.
        """
        seed_limit = os.environ.get("SEED_LIMIT", "").strip()
        if not seed_limit:
            return self
        try:
            limit = int(seed_limit)
        except ValueError:
            logger.warning(f"Ignoring SEED_LIMIT={seed_limit!r}: not an integer")
            return self
        return replace(self, seed_limit=limit or None)


@dataclass
class SourceConfig:
    """One named set of CSV files."""

    name: str
    files: list[Path] = field(default_factory=list)
    enabled: bool = True
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: Path | None = None) -> SourceConfig:
        """Build from a ``sources`` entry, anchoring relative files at base_dir."""
        return cls(
            name=str(data["name"]),
            files=[_resolve_file(entry, base_dir) for entry in data.get("files") or []],
            enabled=bool(data.get("enabled", True)),
            description=data.get("description") or "",
        )


def _resolve_file(entry: str, base_dir: Path | None) -> Path:
    path = Path(entry).expanduser()
    if base_dir is None or path.is_absolute():
        return path
    return base_dir / path


class SourceRegistry:
    """Sources and settings from one YAML file, looked up by name."""

    def __init__(self) -> None:
        self._sources: dict[str, SourceConfig] = {}
        self._ingestion = IngestionConfig()
        self._config_path: Path | None = None

    @property
    def config_path(self) -> Path | None:
        return self._config_path

    @property
    def ingestion(self) -> IngestionConfig:
        """Run settings, with SEED_LIMIT taking precedence over the file."""
        return self._ingestion.with_env_overrides()

    def load_config(self, config_path: Path | str) -> None:
        """
        Replace the registry contents with a YAML file's sources.

        Args:
            config_path: Path to a sources.yaml file

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If two sources share a name
        """
        path = Path(config_path).expanduser().resolve()
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        data = yaml.safe_load(path.read_text()) or {}

        sources: dict[str, SourceConfig] = {}
        for entry in data.get("sources") or []:
            source = SourceConfig.from_dict(entry, base_dir=path.parent)
            if source.name in sources:
                raise ValueError(f"Duplicate source '{source.name}' in {path}")
            sources[source.name] = source

        self._sources = sources
        self._ingestion = IngestionConfig.from_dict(data.get("global"))
        self._config_path = path
        logger.debug(f"Loaded {len(sources)} ingestion sources from {path}")

    def get_source(self, name: str) -> SourceConfig | None:
        """Look up a source by name."""
        return self._sources.get(name)

    def list_sources(self) -> list[SourceConfig]:
        """All sources in file order."""
        return list(self._sources.values())


_default_registry: SourceRegistry | None = None


def get_default_registry() -> SourceRegistry:
    """
    Return the process-wide registry, loading it on first use.

    The file comes from SOURCES_CONFIG_PATH, else config/sources.yaml in the
    project. A missing file leaves the registry empty.
    """
    global _default_registry

    if _default_registry is None:
        registry = SourceRegistry()
        env_path = os.environ.get("SOURCES_CONFIG_PATH")
        path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH
        if path.exists():
            registry.load_config(path)
        else:
            logger.info(f"No sources config at {path}; no sources registered")
        _default_registry = registry

    return _default_registry


def reset_default_registry() -> None:
    """Forget the process-wide registry so the next call reloads it (used by tests)."""
    global _default_registry
    _default_registry = None
