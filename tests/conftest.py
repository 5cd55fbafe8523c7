"""Pytest configuration for tests."""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Set, Tuple

import pytest

from profile_registry.profiles.models import BoneTransform, CharacterProfile
from profile_registry.profiles.registry import ProfileRegistry
from profile_registry.storage.base import ProfileGateway
from profile_registry.storage.file_store import FileProfileStore


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def advance(self, seconds: int = 60) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now

    def __call__(self) -> datetime:
        return self.now


class MemoryGateway(ProfileGateway):
    """In-memory gateway that records every call the registry makes."""

    def __init__(self) -> None:
        self.records: Dict[str, Optional[CharacterProfile]] = {}
        self.saved: List[CharacterProfile] = []
        self.deleted: List[int] = []
        self.fail_saves_for: Set[str] = set()
        self._next_id = 100

    def put(self, location: str, profile: Optional[CharacterProfile]) -> None:
        """Store a record; ``None`` stands in for a malformed file."""
        self.records[location] = profile

    def enumerate(self) -> List[str]:
        return list(self.records)

    def load(self, location: str) -> Tuple[bool, Optional[CharacterProfile]]:
        stored = self.records.get(location)
        if stored is None:
            return False, None
        return True, stored.model_copy(deep=True)

    def save(self, profile: CharacterProfile) -> None:
        if profile.char_name in self.fail_saves_for:
            raise OSError(f"disk full while saving {profile.char_name}")
        if profile.is_new():
            profile.unique_id = self._next_id
            self._next_id += 1
        self.saved.append(profile)
        self.records[f"{profile.unique_id}.yaml"] = profile.model_copy(deep=True)

    def delete(self, profile: CharacterProfile) -> None:
        self.deleted.append(profile.unique_id)
        self.records.pop(f"{profile.unique_id}.yaml", None)


def edited(x: float = 1.0) -> BoneTransform:
    return BoneTransform(translation=(x, 0.0, 0.0))


def make_profile(
    char_name: str = "Alice",
    unique_id: int = 0,
    enabled: bool = False,
    bones: Optional[Dict[str, BoneTransform]] = None,
    profile_name: str = "",
) -> CharacterProfile:
    return CharacterProfile(
        unique_id=unique_id,
        char_name=char_name,
        profile_name=profile_name,
        enabled=enabled,
        bones=bones or {},
    )


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def gateway() -> MemoryGateway:
    return MemoryGateway()


@pytest.fixture
def registry(gateway: MemoryGateway, clock: FixedClock) -> ProfileRegistry:
    return ProfileRegistry(gateway, clock=clock)


@pytest.fixture
def store(tmp_path) -> FileProfileStore:
    return FileProfileStore(tmp_path / "profiles")
