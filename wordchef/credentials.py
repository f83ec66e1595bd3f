# =============================================================================
# WordChef Client - API Key Credential Store
# =============================================================================
# Resolves the API key through an ordered chain of providers:
#   1. the user's local settings file (JSON key-value store)
#   2. the bundled Secrets.plist shipped with the project
# The first provider that returns a non-empty value wins. Saving always
# writes to the settings file. No expiry, rotation or validation.
# =============================================================================

import json
import logging
import os
import plistlib
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

# Fixed settings key the API key is stored under
API_KEY_SETTINGS_KEY = "wordchefApiKey"

# Key inside the bundled Secrets.plist
BUNDLED_API_KEY_FIELD = "API_KEY"


class SettingsFileProvider:
    """
    Reads and writes the API key in a local JSON settings file.

    Args:
        path: Path of the settings file (created on first save).
        key:  Settings key the API key is stored under.
    """

    name = "settings"

    def __init__(self, path: str, key: str = API_KEY_SETTINGS_KEY):
        self._path = path
        self._key = key

    def _read_settings(self) -> dict:
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable settings file: %s", self._path)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self) -> Optional[str]:
        value = self._read_settings().get(self._key)
        return value if isinstance(value, str) and value else None

    def set(self, value: str) -> None:
        """Persist ``value`` under the settings key, keeping other keys intact."""
        settings = self._read_settings()
        settings[self._key] = value

        directory = os.path.dirname(self._path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(settings, f, indent=2)


class BundledPlistProvider:
    """
    Reads the API key from the bundled Secrets.plist configuration file.

    Args:
        path:  Path of the plist file.
        field: Dictionary key holding the API key.
    """

    name = "bundled"

    def __init__(self, path: str, field: str = BUNDLED_API_KEY_FIELD):
        self._path = path
        self._field = field

    def get(self) -> Optional[str]:
        try:
            with open(self._path, "rb") as f:
                data = plistlib.load(f)
        except FileNotFoundError:
            return None
        except (OSError, plistlib.InvalidFileException, ValueError):
            logger.warning("Ignoring unreadable secrets file: %s", self._path)
            return None

        if not isinstance(data, dict):
            return None
        value = data.get(self._field)
        return value if isinstance(value, str) and value else None


class CredentialStore:
    """
    Priority-ordered lookup chain for the API key.

    Args:
        providers: Providers tried in order by ``load``. Each exposes
                   ``get() -> Optional[str]``.
        writer:    Provider that ``save`` writes to; defaults to the first
                   provider.
    """

    def __init__(self, providers: Sequence, writer=None):
        if not providers:
            raise ValueError("CredentialStore needs at least one provider")
        self._providers = list(providers)
        self._writer = writer if writer is not None else self._providers[0]

    @classmethod
    def from_config(cls, config) -> "CredentialStore":
        """Build the standard settings-file -> bundled-plist chain."""
        settings = SettingsFileProvider(config.settings_path)
        bundled = BundledPlistProvider(config.secrets_path)
        return cls([settings, bundled], writer=settings)

    def load(self) -> Optional[str]:
        """
        Return the first non-empty API key found in the provider chain.

        Returns:
            The API key, or None when no provider has one.
        """
        for provider in self._providers:
            value = provider.get()
            if value:
                logger.debug("API key loaded from %s provider", getattr(provider, "name", provider))
                return value

        logger.warning("No API key found; requests will be sent without one.")
        return None

    def save(self, api_key: str) -> None:
        """Persist the API key to the writable provider (local settings)."""
        self._writer.set(api_key)
        logger.info("API key saved to %s provider", getattr(self._writer, "name", self._writer))
