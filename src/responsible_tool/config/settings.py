"""
Centralized settings and path configuration for the responsible tool.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


DEFAULT_TIMEZONE = "Europe/Nicosia"


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def get_data_dir() -> Path:
    """Directory holding the shipped mapping table and its compiled JSON."""
    return Path(__file__).resolve().parent.parent / 'data'


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Mapping files: editable table and compiled document
    mapping_csv: Path
    mapping_json: Path

    # Business operating timezone for the schedule rule
    timezone: str = DEFAULT_TIMEZONE

    # Logging
    log_level: str = "INFO"
    log_dir: Optional[Path] = None

    # HTTP API bind address
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment overrides."""
        root = project_root or get_project_root()
        data_dir = get_data_dir()

        mapping_csv = os.environ.get('RESPONSIBLE_MAPPING_CSV')
        mapping_json = os.environ.get('RESPONSIBLE_MAPPING_JSON')
        log_dir = os.environ.get('RESPONSIBLE_LOG_DIR')

        return cls(
            project_root=root,
            mapping_csv=Path(mapping_csv) if mapping_csv else data_dir / 'responsible_mapping.csv',
            mapping_json=Path(mapping_json) if mapping_json else data_dir / 'responsible_mapping.json',
            timezone=os.environ.get('RESPONSIBLE_TIMEZONE', DEFAULT_TIMEZONE),
            log_level=os.environ.get('RESPONSIBLE_LOG_LEVEL', 'INFO').upper(),
            log_dir=Path(log_dir) if log_dir else None,
            api_host=os.environ.get('RESPONSIBLE_API_HOST', "0.0.0.0"),
            api_port=int(os.environ.get('RESPONSIBLE_API_PORT', "8000")),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings():
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
