"""
Shared configuration utilities for cover lookups.

Provides API key and settings lookup with environment variable priority and
config file fallback.
"""

import json
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

ENV_PREFIX = 'COVERLOOKUP_'

_TRUE_VALUES = ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class CoverSettings:
    """Endpoints, timeouts and limits used by the cover pipeline."""

    # Remote endpoints
    search_endpoint: str = 'https://openlibrary.org/search.json'
    cover_image_endpoint: str = 'https://covers.openlibrary.org/b/id'
    isbn_cover_endpoint: str = 'https://covers.openlibrary.org/b/isbn'
    google_books_endpoint: str = 'https://www.googleapis.com/books/v1/volumes'
    goodreads_search_url: str = 'https://www.goodreads.com/search'
    image_search_endpoint: str = 'https://www.google.com/search'

    # Timeouts in seconds
    search_timeout: float = 10.0
    scrape_timeout: float = 15.0
    download_timeout: float = 15.0
    validate_timeout: float = 5.0

    # Politeness towards rate-limited APIs
    batch_delay: float = 0.5
    max_redirects: int = 5

    # Result limits
    catalog_limit: int = 10
    author_sweep_limit: int = 50
    google_max_results: int = 5
    max_isbn_candidates: int = 5
    max_scrape_candidates: int = 5

    # Storage
    covers_dir: Path = field(default_factory=lambda: Path.cwd() / 'data' / 'covers')
    public_prefix: str = '/covers'
    include_author_in_filename: bool = True

    scrape_enabled: bool = True


def _coerce(value: Any, default: Any) -> Any:
    """Convert a raw env/config value to the type of the default."""
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUE_VALUES
    if isinstance(default, Path):
        return Path(value).expanduser()
    return type(default)(value)


class ConfigManager:
    """Manages configuration loading with environment variable priority."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or Path.home() / ".config" / "coverlookup" / "config.json"
        self._config_cache: Optional[Dict[str, Any]] = None

    def _load_config_file(self) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        if self._config_cache is not None:
            return self._config_cache

        if not self.config_path.exists():
            self._config_cache = {}
            return self._config_cache

        try:
            with open(self.config_path, 'r') as f:
                self._config_cache = json.load(f)
                return self._config_cache
        except (json.JSONDecodeError, IOError, OSError):
            self._config_cache = {}
            return self._config_cache

    def get_api_key(self, key_name: str) -> Optional[str]:
        """
        Get API key with environment variable priority and config file fallback.

        Args:
            key_name: The environment variable name (e.g., 'GOOGLE_BOOKS_API_KEY')

        Returns:
            API key string if found, None otherwise
        """
        # First check environment variable (highest priority)
        env_value = os.getenv(key_name)
        if env_value:
            return env_value

        # Fallback to config file
        config = self._load_config_file()
        return config.get('api_keys', {}).get(key_name)

    def has_api_key(self, key_name: str) -> bool:
        """Check if API key is available from any source."""
        return self.get_api_key(key_name) is not None

    def load_settings(self, **overrides: Any) -> CoverSettings:
        """
        Build cover settings from defaults, the config file and the environment.

        Values under ``settings`` in the config file replace the defaults and
        ``COVERLOOKUP_<FIELD>`` environment variables replace both. Keyword
        overrides win over everything.

        Raises:
            ValueError: If a configured value cannot be converted
        """
        defaults = CoverSettings()
        file_settings = self._load_config_file().get('settings', {})
        values: Dict[str, Any] = {}

        for settings_field in fields(CoverSettings):
            name = settings_field.name
            default = getattr(defaults, name)

            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw is None:
                raw = file_settings.get(name)
            if raw is None:
                continue

            try:
                values[name] = _coerce(raw, default)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Invalid value for setting '{name}': {raw!r}") from e

        values.update({k: v for k, v in overrides.items() if v is not None})
        return replace(defaults, **values)

    def create_example_config(self) -> bool:
        """Create an example configuration file. Returns False if one already exists."""
        if self.config_path.exists():
            return False

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        example_config = {
            "api_keys": {
                "GOOGLE_BOOKS_API_KEY": "your-google-books-api-key-here"
            },
            "settings": {
                "covers_dir": "./data/covers",
                "batch_delay": 0.5,
                "scrape_enabled": True
            }
        }

        with open(self.config_path, 'w') as f:
            json.dump(example_config, f, indent=2)
        return True


# Global instance for easy importing
config_manager = ConfigManager()
