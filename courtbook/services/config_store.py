"""
Layered site configuration store.

Priority: override file (written by the admin API) > base file (committed)
> SiteConfig defaults. Readers get an immutable SiteConfig; an update
builds and validates a new one, persists the override file, then swaps the
active reference under a lock.
"""

import json
import logging
import os
import tempfile
import threading
from functools import lru_cache
from pathlib import Path
from typing import Any

from ..config import settings
from ..exceptions import ConfigurationError
from .slots.config import SiteConfig

logger = logging.getLogger(__name__)


def deep_merge(target: dict, source: dict) -> dict:
    """Merge ``source`` into a copy of ``target``; nested dicts merge recursively."""
    output = dict(target)
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(output.get(key), dict):
            output[key] = deep_merge(output[key], value)
        else:
            output[key] = value
    return output


def _read_json(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path.name}: {e}") from None
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path.name} must contain a JSON object")
    return data


class ConfigStore:
    """Single-writer holder of the active SiteConfig."""

    def __init__(self, base_path: Path, override_path: Path):
        self.base_path = Path(base_path)
        self.override_path = Path(override_path)
        self._lock = threading.Lock()
        self._active = self._load()

    def _load(self) -> SiteConfig:
        base = _read_json(self.base_path)
        override = _read_json(self.override_path)
        logger.info(
            f"Site config loaded (base={self.base_path.exists()}, "
            f"override={self.override_path.exists()})"
        )
        return SiteConfig.from_dict(deep_merge(base, override))

    def current(self) -> SiteConfig:
        return self._active

    def update(self, changes: dict[str, Any]) -> SiteConfig:
        """
        Apply admin changes and swap the active configuration.

        Raises ConfigurationError without touching the active config or the
        override file when the merged result is invalid.
        """
        with self._lock:
            merged = deep_merge(self._active.to_dict(), changes)
            new_config = SiteConfig.from_dict(merged)
            self._write_override(deep_merge(_read_json(self.override_path), changes))
            self._active = new_config

        logger.info(f"Site config updated: {sorted(changes)}")
        return new_config

    def reload(self) -> SiteConfig:
        with self._lock:
            self._active = self._load()
        return self._active

    def _write_override(self, data: dict) -> None:
        self.override_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.override_path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.override_path)
        except OSError:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise


@lru_cache
def get_config_store() -> ConfigStore:
    """Process-wide config store (singleton)."""
    return ConfigStore(settings.site_config_base_path, settings.site_config_override_path)
