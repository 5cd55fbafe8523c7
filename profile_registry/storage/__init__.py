"""Persistence gateways for character profiles."""

from profile_registry.storage.base import ProfileGateway
from profile_registry.storage.file_store import FileProfileStore

__all__ = ["ProfileGateway", "FileProfileStore"]
