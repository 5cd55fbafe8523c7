"""Profile registry: the canonical profile set and the editing session."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, Hashable, Iterator, List, Optional

from profile_registry.config import get_settings
from profile_registry.profiles.conversion import PendingConversions
from profile_registry.profiles.models import (
    NEW_PROFILE_ID,
    CharacterProfile,
    ProfileSummary,
    profile_key,
    utcnow,
)
from profile_registry.profiles.precedence import resolve_enabled_profiles
from profile_registry.profiles.pruning import prune_idempotent_transforms
from profile_registry.storage.base import ProfileGateway

logger = logging.getLogger(__name__)


class ProfileRegistry:
    """
    Runtime owner of character profiles.

    Tracks the canonical profiles keyed by identity, the single profile open
    for editing, and temporary per-character overrides. Every change to
    persisted state is written through the gateway straight away.
    """

    def __init__(
        self,
        gateway: ProfileGateway,
        pending: Optional[PendingConversions] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.gateway = gateway
        self._pending = pending
        self._clock = clock
        self._profiles: Dict[Hashable, CharacterProfile] = {}
        self._temporary: Dict[str, CharacterProfile] = {}
        self._open_in_editor: Optional[CharacterProfile] = None
        self._loaded = False

    # Profile set management

    def load_all(self) -> int:
        """
        Reload every profile the gateway knows about.

        Unreadable records are skipped. When several enabled profiles share a
        character name, the last one loaded stays enabled.

        Returns:
            Number of profiles loaded
        """
        self._profiles.clear()

        loaded = 0
        for location in self.gateway.enumerate():
            ok, profile = self.gateway.load(location)
            if not ok or profile is None:
                continue

            prune_idempotent_transforms(profile)
            self._profiles[profile_key(profile)] = profile
            loaded += 1

            if profile.enabled:
                self.enable(profile)

        self._loaded = True
        logger.info(f"Profiles loaded: {loaded}")
        return loaded

    def discover_new(self) -> int:
        """
        Pick up stored profiles that are not tracked yet.

        Profiles already in memory are left alone, even if their stored form
        has changed since.

        Returns:
            Number of profiles added
        """
        added = 0
        for location in self.gateway.enumerate():
            ok, profile = self.gateway.load(location)
            if not ok or profile is None or profile in self:
                continue

            prune_idempotent_transforms(profile)
            self._profiles[profile_key(profile)] = profile
            added += 1
            logger.debug(f"Discovered profile: {profile}")

        if added:
            logger.info(f"Discovered {added} new profile(s)")
        return added

    def add_or_replace(self, profile: CharacterProfile, force_new: bool = False) -> None:
        """
        Track a profile and persist it immediately.

        If a profile with the same identity is tracked (and ``force_new`` is
        not set), the given profile replaces it and keeps its identity and
        creation date. Otherwise it is registered as a new profile with fresh
        dates, and a forced-new profile also gets a fresh identity.

        Args:
            profile: The profile to store
            force_new: Register as a new profile even if the identity exists

        Raises:
            OSError: If the gateway fails to persist; the set and the
                profile's identity and dates are left as they were
        """
        prune_idempotent_transforms(profile)

        now = self._clock()
        old_key = profile_key(profile)
        replacing = not force_new and old_key in self._profiles

        previous = (profile.unique_id, profile.creation_date, profile.modified_date)

        if replacing:
            profile.creation_date = self._profiles[old_key].creation_date
            profile.modified_date = now
        else:
            if force_new:
                profile.unique_id = NEW_PROFILE_ID
            profile.creation_date = now
            profile.modified_date = now

        try:
            self.gateway.save(profile)
        except Exception:
            profile.unique_id, profile.creation_date, profile.modified_date = previous
            raise

        # A forced-new profile may itself be tracked under its old identity
        if replacing or self._profiles.get(old_key) is profile:
            del self._profiles[old_key]
        self._profiles[profile_key(profile)] = profile

        logger.info(f"{'Replaced' if replacing else 'Added'} profile {profile}")

        if profile.enabled:
            for disabled in self.enable(profile):
                self.gateway.save(disabled)

    def delete(self, profile: CharacterProfile) -> bool:
        """
        Stop tracking a profile and erase its stored record.

        Returns:
            True if the profile was tracked, False otherwise
        """
        key = profile_key(profile)
        tracked = self._profiles.get(key)
        if tracked is None:
            return False

        self.gateway.delete(tracked)
        del self._profiles[key]
        logger.info(f"Deleted profile {tracked}")
        return True

    def save_all(self) -> int:
        """
        Prune and persist every tracked profile.

        A failure for one profile is logged and the rest are still saved.

        Returns:
            Number of profiles saved successfully
        """
        saved = 0
        for profile in list(self._profiles.values()):
            prune_idempotent_transforms(profile)
            try:
                self.gateway.save(profile)
            except Exception as e:
                logger.error(f"Failed to save profile {profile}: {e}", exc_info=True)
                continue
            saved += 1

        # New profiles may have been given an identity while saving
        self._profiles = {profile_key(p): p for p in self._profiles.values()}

        logger.info(f"Saved {saved} of {len(self._profiles)} profile(s)")
        return saved

    def process_pending_conversions(self) -> int:
        """
        Register profiles left behind by a legacy config migration.

        Returns:
            Number of converted profiles added
        """
        if self._pending is None:
            return 0

        processed = 0
        for profile in self._pending.drain():
            self.add_or_replace(profile)
            processed += 1

        if processed:
            logger.info(f"Registered {processed} converted profile(s)")
        return processed

    # Enable exclusivity

    def enable(self, profile: CharacterProfile) -> List[CharacterProfile]:
        """
        Enable a profile and disable every other profile for its character.

        Returns:
            The tracked profiles that were switched off
        """
        profile.enabled = True

        key = profile_key(profile)
        disabled = []
        for other in self._profiles.values():
            if (
                other.enabled
                and other.char_name == profile.char_name
                and profile_key(other) != key
            ):
                other.enabled = False
                disabled.append(other)

        for other in disabled:
            logger.debug(f"Disabled {other} in favour of {profile}")
        return disabled

    # Editing session

    @property
    def profile_open_in_editor(self) -> Optional[CharacterProfile]:
        return self._open_in_editor

    def begin_edit(self, profile: Optional[CharacterProfile]) -> Optional[CharacterProfile]:
        """
        Open a working copy of ``profile`` for editing.

        Opening another profile replaces the current session.

        Args:
            profile: The canonical profile to edit

        Returns:
            The working copy, or None if ``profile`` is the copy already open
        """
        if profile is None or profile is self._open_in_editor:
            logger.debug(f"Refusing to open {profile} for editing")
            return None

        copy = CharacterProfile.copy_of(profile)
        prune_idempotent_transforms(copy)
        self._open_in_editor = copy
        logger.debug(f"Editing {copy}")
        return copy

    def commit_edit(self, copy: CharacterProfile, finish_editing: bool = False) -> bool:
        """
        Store the working copy in place of its original.

        Args:
            copy: The open working copy
            finish_editing: End the session after saving

        Returns:
            False if ``copy`` is not the profile open in the editor
        """
        if copy is not self._open_in_editor:
            logger.debug(f"Ignoring commit for {copy}: not open in the editor")
            return False

        self.add_or_replace(copy)

        if finish_editing:
            self.end_edit(copy)
        return True

    def end_edit(self, copy: Optional[CharacterProfile] = None) -> None:
        self._open_in_editor = None

    def revert(self, copy: CharacterProfile) -> bool:
        """
        Undo uncommitted bone changes in the working copy.

        Bones shared with the original are reset in place; bones added during
        the session are removed. Bones only the original has are not touched.

        Returns:
            False if there is no matching session or no original to revert to
        """
        if copy is not self._open_in_editor:
            logger.debug(f"Ignoring revert for {copy}: not open in the editor")
            return False

        original = self._profiles.get(profile_key(copy))
        if original is None:
            logger.debug(f"Ignoring revert for {copy}: no stored original")
            return False

        for bone_name, transform in list(copy.bones.items()):
            source = original.bones.get(bone_name)
            if source is not None:
                transform.update_to_match(source)
            else:
                del copy.bones[bone_name]
        return True

    # Temporary overrides

    def set_temporary(self, char_name: str, profile: CharacterProfile) -> None:
        self._temporary[char_name] = profile

    def clear_temporary(self, char_name: str) -> bool:
        return self._temporary.pop(char_name, None) is not None

    def get_temporary(self, char_name: str) -> Optional[CharacterProfile]:
        return self._temporary.get(char_name)

    # Queries

    def get_enabled_profiles(self) -> List[CharacterProfile]:
        """Return the profiles that should currently be applied."""
        return resolve_enabled_profiles(
            self._profiles.values(), self._temporary, self._open_in_editor
        )

    def get_profile_by_unique_id(self, unique_id: int) -> Optional[CharacterProfile]:
        if unique_id == NEW_PROFILE_ID:
            return None
        return self._profiles.get(unique_id)

    def get_profile_by_character_name(self, char_name: str) -> Optional[CharacterProfile]:
        return next(
            (p for p in self._profiles.values() if p.char_name == char_name), None
        )

    def get_profiles_for_character(self, char_name: str) -> List[CharacterProfile]:
        return [p for p in self._profiles.values() if p.char_name == char_name]

    def list_profiles(self) -> List[ProfileSummary]:
        """
        Get summary information about all tracked profiles.

        Returns:
            List of profile summaries
        """
        return [
            ProfileSummary(
                unique_id=profile.unique_id,
                char_name=profile.char_name,
                profile_name=profile.profile_name,
                enabled=profile.enabled,
                bone_count=len(profile.bones),
                modified_date=profile.modified_date,
            )
            for profile in self._profiles.values()
        ]

    def get_available_ids(self) -> List[int]:
        """Get list of persisted profile IDs."""
        return [p.unique_id for p in self._profiles.values() if not p.is_new()]

    def is_loaded(self) -> bool:
        """Check if profiles have been loaded."""
        return self._loaded

    def clear(self) -> None:
        """Forget all tracked profiles, overrides and the editing session."""
        self._profiles.clear()
        self._temporary.clear()
        self._open_in_editor = None
        self._loaded = False

    def __len__(self) -> int:
        return len(self._profiles)

    def __iter__(self) -> Iterator[CharacterProfile]:
        return iter(list(self._profiles.values()))

    def __contains__(self, profile: object) -> bool:
        if not isinstance(profile, CharacterProfile):
            return False
        return profile_key(profile) in self._profiles


# Global registry instance
_registry: Optional[ProfileRegistry] = None


def get_profile_registry() -> ProfileRegistry:
    """Get the global profile registry, backed by the configured directory."""
    global _registry
    if _registry is None:
        from profile_registry.storage.file_store import FileProfileStore

        settings = get_settings()
        _registry = ProfileRegistry(
            FileProfileStore(settings.profiles_dir, settings.profile_suffix)
        )
    return _registry


def reload_profiles() -> int:
    """
    Reload the global registry from storage.

    Returns:
        Number of profiles loaded
    """
    registry = get_profile_registry()
    registry.clear()
    return registry.load_all()
