"""Removal of bone entries that carry no change from identity."""

from profile_registry.profiles.models import CharacterProfile


def prune_idempotent_transforms(profile: CharacterProfile) -> int:
    """
    Drop every bone whose transform is not edited.

    Whether a transform counts as edited is decided by the transform itself.
    Safe to call repeatedly.

    Args:
        profile: Profile to prune in place

    Returns:
        Number of bone entries removed
    """
    unedited = [name for name, bt in profile.bones.items() if not bt.is_edited()]
    for name in unedited:
        del profile.bones[name]
    return len(unedited)
