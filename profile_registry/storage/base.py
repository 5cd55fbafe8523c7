"""Persistence gateway contract consumed by the profile registry."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Iterable, Optional, Tuple

if TYPE_CHECKING:
    from profile_registry.profiles.models import CharacterProfile


class ProfileGateway(ABC):
    """Durable storage for profile records."""

    @abstractmethod
    def enumerate(self) -> Iterable[Any]:
        """Return the locations of every stored profile record."""

    @abstractmethod
    def load(self, location: Any) -> Tuple[bool, Optional[CharacterProfile]]:
        """Load one record; malformed data yields ``(False, None)``, never an exception."""

    @abstractmethod
    def save(self, profile: CharacterProfile) -> None:
        """Upsert a profile, assigning a durable ``unique_id`` to new profiles."""

    @abstractmethod
    def delete(self, profile: CharacterProfile) -> None:
        """Remove a profile's durable record; no-op if it does not exist."""
