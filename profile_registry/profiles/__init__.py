"""Profile system for the character profile registry."""

from profile_registry.profiles.conversion import PendingConversions
from profile_registry.profiles.models import (
    BoneTransform,
    CharacterProfile,
    ProfileSummary,
    profile_key,
)
from profile_registry.profiles.pruning import prune_idempotent_transforms
from profile_registry.profiles.registry import ProfileRegistry, get_profile_registry

__all__ = [
    "BoneTransform",
    "CharacterProfile",
    "PendingConversions",
    "ProfileRegistry",
    "ProfileSummary",
    "get_profile_registry",
    "profile_key",
    "prune_idempotent_transforms",
]
