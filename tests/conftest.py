import itertools
from pathlib import Path

import pytest

from atomic_generator.parser.swagger import parse_openapi

FIXTURES = Path(__file__).parent / "fixtures"


def counting_ids():
    """Deterministic stand-in for KSUIDs: ID000...0, ID000...1, ..."""
    counter = itertools.count()
    return lambda: f"ID{next(counter):025d}"


@pytest.fixture
def widgets_spec():
    return parse_openapi(FIXTURES / "widgets.yaml")


@pytest.fixture
def netbox_spec():
    return parse_openapi(FIXTURES / "netbox.yaml")


@pytest.fixture
def make_ids():
    return counting_ids
