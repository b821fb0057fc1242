"""Mock implementations for testing."""

from tests.imgdrop.mocks.object_store import MockObjectStore

__all__ = ["MockObjectStore"]
