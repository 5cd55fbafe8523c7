"""Enabled-set resolution across stored, temporary and edited profiles."""

from typing import Iterable, List, Mapping, Optional

from profile_registry.profiles.models import CharacterProfile, profile_key


def resolve_enabled_profiles(
    stored: Iterable[CharacterProfile],
    temporary: Mapping[str, CharacterProfile],
    editing: Optional[CharacterProfile],
) -> List[CharacterProfile]:
    """
    Merge the three profile sources into the list of active profiles.

    Order: stored enabled profiles (minus the one being edited), then every
    temporary override, then the working copy if it is enabled.

    Results are not deduplicated by character name; a consumer may get both
    a temporary override and a stored profile for the same character.

    Args:
        stored: Profiles tracked by the registry
        temporary: Temporary overrides keyed by character name
        editing: Working copy currently open in the editor, if any

    Returns:
        A new list; later registry changes do not alter it
    """
    # A profile being edited is treated as disabled; its live state is the copy
    editing_key = profile_key(editing) if editing is not None else None

    enabled = [
        profile
        for profile in stored
        if profile.enabled
        and (editing_key is None or profile_key(profile) != editing_key)
    ]

    enabled.extend(temporary.values())

    if editing is not None and editing.enabled:
        enabled.append(editing)

    return enabled
