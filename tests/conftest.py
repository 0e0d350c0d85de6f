"""Pytest configuration: project root on sys.path plus shared fixtures."""

import os
import sys
from uuid import uuid4

import pytest

# Project root = parent directory of this tests/ folder
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from core.state.profile_store import ProfileStore  # noqa: E402
from core.state.session import ClientSession  # noqa: E402
from tests.factories import FakeProfileRows  # noqa: E402


@pytest.fixture
def rows():
    return FakeProfileRows()


@pytest.fixture
def session(rows):
    return ClientSession(id="session-1", profiles=ProfileStore(rows.load))


@pytest.fixture
def user_id():
    return uuid4()
