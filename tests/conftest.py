"""
Pytest configuration and shared fixtures for Merkle tree tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used leaf sets and trees
3. Keeps environment and default-config state isolated
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from merkle_core.config import set_default_config  # noqa: E402
from merkle_core.merkle import MerkleTree  # noqa: E402


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def protein_leaves() -> list[bytes]:
    """Four UTF-8 leaves: protein, powder, is, great."""
    return [s.encode("utf-8") for s in ["protein", "powder", "is", "great"]]


@pytest.fixture
def protein_tree(protein_leaves) -> MerkleTree:
    """Tree built over protein_leaves with the default hasher."""
    return MerkleTree.build(protein_leaves)


@pytest.fixture
def make_leaves():
    """Factory for n distinct leaves: leaf0, leaf1, ..."""
    def _make(n: int) -> list[bytes]:
        return [f"leaf{i}".encode() for i in range(n)]
    return _make


@pytest.fixture(autouse=True)
def _clean_merkle_env(monkeypatch):
    """Drop MERKLE_* env vars and the cached default config for every test."""
    for key in (
        "MERKLE_HASH_ALGORITHM",
        "MERKLE_MAX_WORKERS",
        "MERKLE_LOG_LEVEL",
        "MERKLE_LOG_FILE",
    ):
        monkeypatch.delenv(key, raising=False)
    set_default_config(None)
    yield
    set_default_config(None)
