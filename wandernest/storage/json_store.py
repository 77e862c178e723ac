import json
import logging
from pathlib import Path

from pydantic import ValidationError

from wandernest.models import UserPreferences

logger = logging.getLogger(__name__)


class JSONStore:
    """Service for saving and loading user preferences as JSON."""

    def __init__(self, data_dir: Path | str = "plans"):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _get_path(self, name: str) -> Path:
        """Get the file path for a profile by name."""
        safe_name = "".join(c if c.isalnum() or c in "._-" else "_" for c in name)
        return self.data_dir / f"preferences_{safe_name}.json"

    def save_preferences(self, preferences: UserPreferences, name: str = "default") -> Path:
        """
        Save preferences (language, currency, wishlist) to a JSON file.

        Args:
            preferences: The preferences to save
            name: Profile name

        Returns:
            Path to the saved file
        """
        path = self._get_path(name)

        data = preferences.model_dump(mode="json")

        with open(path, "w") as f:
            json.dump(data, f, indent=2)

        return path

    def load_preferences(self, name: str = "default") -> UserPreferences | None:
        """
        Load saved preferences.

        Args:
            name: Profile name

        Returns:
            Loaded UserPreferences or None if missing or unreadable
        """
        path = self._get_path(name)

        if not path.exists():
            return None

        try:
            with open(path) as f:
                data = json.load(f)
            return UserPreferences.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("Ignoring unreadable preferences file %s: %s", path, e)
            return None

    def list_profiles(self) -> list[str]:
        """
        List all saved profiles.

        Returns:
            List of profile names
        """
        profiles = []
        for path in self.data_dir.glob("preferences_*.json"):
            profiles.append(path.stem.replace("preferences_", "", 1))
        return sorted(profiles)

    def delete_preferences(self, name: str = "default") -> bool:
        """
        Delete a saved profile.

        Args:
            name: Profile name

        Returns:
            True if deleted, False if not found
        """
        path = self._get_path(name)
        if path.exists():
            path.unlink()
            return True
        return False
