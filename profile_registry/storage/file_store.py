"""Directory-backed profile storage, one YAML file per profile."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import yaml
from pydantic import ValidationError

from profile_registry.profiles.models import NEW_PROFILE_ID, CharacterProfile
from profile_registry.storage.base import ProfileGateway

logger = logging.getLogger(__name__)


def _stem_id(path: Path) -> Optional[int]:
    stem = path.stem
    if not (stem.isascii() and stem.isdecimal()):
        return None
    return int(stem)


class FileProfileStore(ProfileGateway):
    """Stores each profile as ``<unique_id><suffix>`` inside a directory."""

    def __init__(self, directory: str | Path, suffix: str = ".yaml") -> None:
        self.directory = Path(directory)
        self.suffix = suffix
        self._last_assigned_id = NEW_PROFILE_ID

    def path_for(self, profile: CharacterProfile) -> Path:
        return self.directory / f"{profile.unique_id}{self.suffix}"

    def enumerate(self) -> List[Path]:
        """
        List profile files, ordered by numeric ID.

        Returns:
            Paths of candidate profile files; empty if the directory is missing
        """
        if not self.directory.exists():
            logger.warning(f"Profiles directory not found: {self.directory}")
            return []

        if not self.directory.is_dir():
            logger.error(f"Profiles path is not a directory: {self.directory}")
            return []

        paths = [p for p in self.directory.glob(f"*{self.suffix}") if p.is_file()]
        return sorted(paths, key=lambda p: (_stem_id(p) is None, _stem_id(p) or 0, p.name))

    def load(self, location: str | Path) -> Tuple[bool, Optional[CharacterProfile]]:
        """
        Load a profile from a YAML file.

        Args:
            location: Path to the profile file

        Returns:
            ``(True, profile)`` on success, ``(False, None)`` if the file is
            missing, empty or malformed
        """
        path = Path(location)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)

            if not data:
                logger.warning(f"Empty profile file: {path}")
                return False, None

            profile = CharacterProfile.model_validate(data)

        except yaml.YAMLError as e:
            logger.warning(f"YAML parse error in {path}: {e}")
            return False, None
        except ValidationError as e:
            logger.warning(f"Validation error in {path}: {e}")
            return False, None
        except UnicodeDecodeError as e:
            logger.warning(f"Profile {path} is not valid UTF-8: {e}")
            return False, None
        except OSError as e:
            logger.warning(f"Could not read profile {path}: {e}")
            return False, None

        # The file name is authoritative, saves always go to <unique_id><suffix>
        stem_id = _stem_id(path)
        if stem_id and stem_id != profile.unique_id:
            if not profile.is_new():
                logger.warning(
                    f"Profile {path} records id {profile.unique_id}, using {stem_id} from its file name"
                )
            profile.unique_id = stem_id

        logger.debug(f"Loaded profile: {profile} from {path}")
        return True, profile

    def save(self, profile: CharacterProfile) -> None:
        """
        Write a profile, assigning it a fresh ID if it has none.

        Args:
            profile: The profile to persist

        Raises:
            OSError: If the file cannot be written
        """
        self.directory.mkdir(parents=True, exist_ok=True)

        if profile.is_new():
            profile.unique_id = self._allocate_id()
            logger.debug(f"Assigned id {profile.unique_id} to new profile")

        path = self.path_for(profile)
        data = profile.model_dump(mode="json")

        # Write atomically: write to temp file, then rename
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
            temp_path.replace(path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

        logger.debug(f"Saved profile {profile} to {path}")

    def delete(self, profile: CharacterProfile) -> None:
        if profile.is_new():
            return

        path = self.path_for(profile)
        if path.exists():
            path.unlink()
            logger.debug(f"Deleted profile file {path}")
        else:
            logger.debug(f"No profile file to delete at {path}")

    def _allocate_id(self) -> int:
        existing = [
            stem_id
            for stem_id in (_stem_id(p) for p in self.directory.glob(f"*{self.suffix}"))
            if stem_id is not None
        ]
        next_id = max(existing + [self._last_assigned_id]) + 1
        self._last_assigned_id = next_id
        return next_id
