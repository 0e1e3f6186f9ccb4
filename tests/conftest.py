"""Shared pytest fixtures for changeset error test suites."""

from collections.abc import Generator
from pathlib import Path
import sys
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def nested_errors() -> dict[str, Any]:
    """Changeset-style error tree mixing fields, nested maps and nested lists."""
    return {
        "name": ["invalid!"],
        "nested": {"user_id": ["not an int"]},
        "nestedList": [
            {"something": ["is wrong"]},
            {"very": [{"nested": ["list"]}]},
        ],
    }


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Provide a test client for an app with the changeset error handlers registered."""
    from changeset_errors.api.handlers import register_error_handlers

    app = FastAPI()
    register_error_handlers(app)

    with TestClient(app) as test_client:
        yield test_client
