"""Shared fixtures for the API tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from circuitguard.main import create_app


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())
