"""Test utilities for mpa projects.

Provides an in-process ASGI test client for the dev server::

    from mpa.testing import TestClient
"""

from mpa.testing.client import BROWSER_ACCEPT, TestClient

__all__ = ["BROWSER_ACCEPT", "TestClient"]
