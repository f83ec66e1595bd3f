# =============================================================================
# WordChef Client - Centralized Configuration
# =============================================================================
# Provides a single Config dataclass containing all tunable parameters for
# the WordChef API client and CLI. Parameters are overridable via environment
# variables with the WORDCHEF_ prefix (e.g., WORDCHEF_BASE_URL=http://localhost).
# =============================================================================

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# Project root directory (where this file lives)
_PROJECT_ROOT = str(Path(__file__).parent.resolve())


def _optional_float(value: str) -> Optional[float]:
    """
    Convert an environment string to a float, treating "" and "none" as unset.

    Args:
        value: Raw environment variable value.

    Returns:
        The parsed float, or None.
    """
    if value.strip().lower() in ("", "none"):
        return None
    return float(value)


def _optional_str(value: str) -> Optional[str]:
    return value or None


@dataclass
class Config:
    """
    Centralized configuration for the WordChef client.

    All fields can be overridden via environment variables prefixed with WORDCHEF_.
    """

    # -- Networking --
    base_url: str = "https://wordchef.app"
    request_timeout: Optional[float] = None  # None = no client-side timeout

    # -- Query --
    default_limit: int = 5
    max_limit: int = 20

    # -- Credential storage --
    settings_path: str = field(
        default_factory=lambda: os.path.join(Path.home(), ".wordchef", "settings.json")
    )
    secrets_path: str = field(
        default_factory=lambda: os.path.join(_PROJECT_ROOT, "Secrets.plist")
    )

    # -- Output --
    output_dir: Optional[str] = None

    def __post_init__(self):
        """Apply environment variable overrides and normalize derived fields."""
        self._apply_env_overrides()
        self.base_url = self.base_url.rstrip("/")

    def _apply_env_overrides(self):
        """
        Override config fields from environment variables.

        Looks for WORDCHEF_<FIELD_NAME_UPPERCASE> environment variables and
        applies them with appropriate type conversion.
        """
        field_types = {
            "base_url": str,
            "request_timeout": _optional_float,
            "default_limit": int,
            "max_limit": int,
            "settings_path": str,
            "secrets_path": str,
            "output_dir": _optional_str,
        }
        for field_name, field_type in field_types.items():
            env_key = f"WORDCHEF_{field_name.upper()}"
            env_value = os.environ.get(env_key)
            if env_value is not None:
                setattr(self, field_name, field_type(env_value))


# ---------------------------------------------------------------------------
# Singleton accessor
# ---------------------------------------------------------------------------
_config_instance: Optional[Config] = None


def get_config() -> Config:
    """
    Return the singleton Config instance, creating it on first call.

    Returns:
        Config: The global configuration object.
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance
