from __future__ import annotations

import pytest

from solder_sync.core import dependencies
from tests.helpers import FakeSolder


@pytest.fixture
def solder() -> FakeSolder:
    return FakeSolder()


@pytest.fixture(autouse=True)
def _reset_dependencies():
    dependencies.reset()
    yield
    dependencies.reset()
