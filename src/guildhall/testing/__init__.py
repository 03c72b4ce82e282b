"""Testing utilities for guildhall applications."""

from guildhall.testing.client import TestClient

__all__ = ["TestClient"]
