"""Holding area for profiles produced by a legacy config migration."""

from __future__ import annotations

import logging
from typing import Iterator, List

from profile_registry.profiles.models import CharacterProfile

logger = logging.getLogger(__name__)


class PendingConversions:
    """
    Queue of converted profiles awaiting registration.

    The migration step fills it before a registry exists. The registry it is
    handed to drains it once via ``process_pending_conversions``.
    """

    def __init__(self) -> None:
        self._profiles: List[CharacterProfile] = []

    def add(self, profile: CharacterProfile) -> None:
        self._profiles.append(profile)
        logger.debug(f"Queued converted profile: {profile}")

    def drain(self) -> Iterator[CharacterProfile]:
        """Yield and remove queued profiles in insertion order."""
        while self._profiles:
            yield self._profiles.pop(0)

    def __len__(self) -> int:
        return len(self._profiles)
