"""
tests/conftest.py - Shared fixtures

Puts the repository root on sys.path so the flat modules import as they
do in production.
"""

import random
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def rng():
    """Seeded random source for reproducible trials."""
    return random.Random(12345)
