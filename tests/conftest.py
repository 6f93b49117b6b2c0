"""Shared test fixtures for Armada."""

from __future__ import annotations

import pytest

from armada.networking.peer import MockTransport
from armada.simulation.board import Board
from armada.simulation.rng import Lfsr16
from armada.simulation.state import Settings
from tests.harness import Harness


@pytest.fixture
def board() -> Board:
    """An empty board."""
    return Board()


@pytest.fixture
def rng() -> Lfsr16:
    """An LFSR with a fixed seed."""
    return Lfsr16(seed=0x1234)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def mock_transport() -> MockTransport:
    return MockTransport()


@pytest.fixture
def harness() -> Harness:
    """A controller wired to mocks, not yet stepped."""
    return Harness()
