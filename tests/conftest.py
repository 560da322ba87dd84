"""
Shared test fixtures for the wirebridge test suite.
"""

import pytest
from typing import Any, List

from wirebridge.di import ContainerBuilder

from tests.harness import make_builder


@pytest.fixture
def builder() -> ContainerBuilder:
    return make_builder()


@pytest.fixture
def event_log() -> List[Any]:
    return []
