"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures required for testing multiple layers.
"""

import pytest

from tests.helpers import RecordingNotifier, ScriptedRandom


@pytest.fixture
def rng() -> ScriptedRandom:
    """Knights behave rook-like, bishops swap with the first pawn found (row-major)"""
    return ScriptedRandom()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
