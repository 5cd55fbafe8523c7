"""Profile data models for the character profile registry."""

from datetime import datetime, timezone
from typing import Dict, Hashable, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

Vector3 = Tuple[float, float, float]

NEW_PROFILE_ID = 0
EDIT_TOLERANCE = 1e-5

ZERO_VECTOR: Vector3 = (0.0, 0.0, 0.0)
UNIT_VECTOR: Vector3 = (1.0, 1.0, 1.0)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_approximately(value: Vector3, target: Vector3) -> bool:
    return all(abs(a - b) <= EDIT_TOLERANCE for a, b in zip(value, target))


class BoneTransform(BaseModel):
    """Per-bone override relative to the identity transform."""

    translation: Vector3 = Field(default=ZERO_VECTOR, description="Position offset")
    rotation: Vector3 = Field(
        default=ZERO_VECTOR, description="Euler rotation in degrees"
    )
    scaling: Vector3 = Field(default=UNIT_VECTOR, description="Per-axis scale")

    def is_edited(self) -> bool:
        """Return True when any component differs from identity."""
        return not (
            _is_approximately(self.translation, ZERO_VECTOR)
            and _is_approximately(self.rotation, ZERO_VECTOR)
            and _is_approximately(self.scaling, UNIT_VECTOR)
        )

    def update_to_match(self, other: "BoneTransform") -> None:
        """
        Copy ``other``'s values into this transform in place.

        The object itself is kept, so anything holding a reference to it
        (an editor widget, for instance) sees the new values.
        """
        self.translation = other.translation
        self.rotation = other.rotation
        self.scaling = other.scaling

    def reset(self) -> None:
        self.translation = ZERO_VECTOR
        self.rotation = ZERO_VECTOR
        self.scaling = UNIT_VECTOR


class CharacterProfile(BaseModel):
    """A persistable set of bone overrides for one character."""

    unique_id: int = Field(
        default=NEW_PROFILE_ID, ge=0, description="Durable identity, 0 when new"
    )
    char_name: str = Field(..., description="Display name of the owning character")
    profile_name: str = Field(default="", description="User-facing profile label")
    enabled: bool = Field(default=False, description="Active for its character")
    creation_date: datetime = Field(default_factory=utcnow)
    modified_date: datetime = Field(default_factory=utcnow)
    bones: Dict[str, BoneTransform] = Field(
        default_factory=dict, description="Bone name to transform override"
    )

    @field_validator("char_name")
    @classmethod
    def validate_char_name(cls, v: str) -> str:
        """Character names are matched exactly, so surrounding spaces are dropped."""
        v = v.strip()
        if not v:
            raise ValueError("Character name must not be empty")
        return v

    @classmethod
    def copy_of(cls, profile: "CharacterProfile") -> "CharacterProfile":
        """
        Deep copy a profile.

        The copy owns its own bone transforms. Identity and creation date are
        carried over unchanged; they are only regenerated if the copy is later
        registered as a new profile.
        """
        return profile.model_copy(deep=True)

    def is_new(self) -> bool:
        return self.unique_id == NEW_PROFILE_ID

    def get_bone(self, bone_name: str) -> Optional[BoneTransform]:
        return self.bones.get(bone_name)

    def get_or_add_bone(self, bone_name: str) -> BoneTransform:
        """Return the transform for ``bone_name``, adding an identity one if missing."""
        transform = self.bones.get(bone_name)
        if transform is None:
            transform = BoneTransform()
            self.bones[bone_name] = transform
        return transform

    def __str__(self) -> str:
        label = self.profile_name or "<unnamed>"
        return f"{self.char_name}/{label}#{self.unique_id}"


class ProfileSummary(BaseModel):
    """Summary information about a profile for listings."""

    unique_id: int
    char_name: str
    profile_name: str
    enabled: bool
    bone_count: int
    modified_date: datetime


def profile_key(profile: CharacterProfile) -> Hashable:
    """
    Identity key used by the registry's keyed map.

    Two profiles are the same profile when they share a non-zero
    ``unique_id``. A new (zero-ID) profile is keyed by the object itself, so
    it never matches anything but itself.
    """
    if profile.is_new():
        return ("new", id(profile))
    return profile.unique_id
