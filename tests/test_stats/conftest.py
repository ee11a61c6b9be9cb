"""Shared fixtures for statistics report tests."""

import pytest

from tests.conftest import make_catalog, make_ledger


@pytest.fixture
def swapped_pair():
    """Three users, two songs; Bob swaps the order the other two agree on.

             Alice  Bob  Carol
    A          1     2     1
    B          2     1     2
    """
    return make_ledger("Tab", {
        "Alice": {"A": 1, "B": 2},
        "Bob": {"A": 2, "B": 1},
        "Carol": {"A": 1, "B": 2},
    })


@pytest.fixture
def spread():
    """One song ranked 10, 20, 30; population std dev is sqrt(200/3)."""
    return make_ledger("Tab", {
        "Alice": {"S": 10, "T": 1},
        "Bob": {"S": 20, "T": 1},
        "Carol": {"S": 30, "T": 1},
    })


@pytest.fixture
def hot_take():
    """A 100-song group where A ranks song S 5th and B ranks it 95th."""
    songs = ["S", *(f"Filler {i}" for i in range(99))]
    return make_ledger("Tab", {"A": {"S": 5}, "B": {"S": 95}}, songs=songs)


@pytest.fixture
def sleeper():
    """Song S is Alice's favourite and near the bottom for everyone else."""
    return make_ledger("Tab", {
        "Alice": {"S": 1, "T": 50},
        "Bob": {"S": 100, "T": 50},
        "Carol": {"S": 100, "T": 50},
    })


@pytest.fixture
def catalog():
    return make_catalog(
        ("ID:1", "S", "ID:160"),
        ("ID:2", "T", "ID:160;ID:170"),
        ("ID:3", "U", "ID:170"),
    )
