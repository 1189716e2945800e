"""
Mapping Loader - reads the compiled responsible mapping into a MappingConfig.
"""
import json
import logging
import threading
from pathlib import Path
from typing import Optional

from ..engine.models import MappingConfig

logger = logging.getLogger(__name__)


def load_mapping(path: Path) -> MappingConfig:
    """
    Load a compiled mapping document.

    Raises:
        FileNotFoundError: the file does not exist
        ValueError: the file is not valid JSON or has a malformed section
    """
    if not path.exists():
        raise FileNotFoundError(
            f"responsible_mapping.json not found at {path}. "
            "Run compile_mapping first."
        )

    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

    config = MappingConfig.from_dict(data)
    logger.debug("Loaded mapping from %s: %s", path, config.counts())
    return config


class MappingStore:
    """Holds the live mapping and swaps it atomically on reload."""

    def __init__(self, path: Path, config: Optional[MappingConfig] = None):
        self.path = path
        self._config = config
        self._lock = threading.Lock()
        self.loaded_at: Optional[float] = None

    @property
    def config(self) -> MappingConfig:
        if self._config is None:
            self.reload()
        return self._config

    def set(self, config: MappingConfig):
        with self._lock:
            self._config = config

    def reload(self) -> MappingConfig:
        """Re-read the mapping file; the previous config stays live on failure."""
        config = load_mapping(self.path)
        with self._lock:
            self._config = config
            self.loaded_at = self.path.stat().st_mtime
        logger.info("Mapping reloaded from %s", self.path)
        return config

    def try_reload(self) -> Optional[str]:
        """Reload, returning the error message instead of raising (None on success)."""
        try:
            self.reload()
        except (FileNotFoundError, ValueError) as e:
            logger.error("Mapping reload from %s failed: %s", self.path, e)
            return str(e)
        return None
