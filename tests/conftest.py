"""Pytest fixtures for ranchhand tests."""

import tempfile
from pathlib import Path

import pytest

from ranchhand.auth import Actor
from ranchhand.ranch import Ranch
from ranchhand.store import DocumentStore


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store(temp_dir):
    """A document store rooted in a temporary data directory."""
    return DocumentStore(temp_dir / "data")


@pytest.fixture
def ranch(store):
    """All services wired over the temporary store."""
    return Ranch(store=store)


@pytest.fixture
def admin():
    return Actor(id="u-admin", name="Dutch", role="admin")


@pytest.fixture
def member():
    return Actor(id="u-member", name="Sadie", role="member")


@pytest.fixture
def other_member():
    return Actor(id="u-member-2", name="Charles", role="member")


@pytest.fixture
def guest():
    return Actor(id="u-guest", name="Visitor", role="guest")


def hay_and_milk(hay_qty: int = 2, milk_qty: int = 1) -> list[dict]:
    """Line items as a form would submit them."""
    return [
        {"catalog_ref": "hay", "name": "Hay", "unit_price": "0.75", "quantity": hay_qty},
        {"catalog_ref": "milk", "name": "Milk", "unit_price": "0.75", "quantity": milk_qty},
    ]
