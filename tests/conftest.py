"""Pytest configuration and shared fixtures."""

from datetime import date

import pytest

from tests.factories import make_template
from upkeep.domain.property import Property, Unit
from upkeep.domain.template import Template


@pytest.fixture
def single_family_property() -> Property:
    """A one-door property."""
    return Property(id="sf-1", address="12 Elm St", door_count=1, climate_zone="Pacific Northwest")


@pytest.fixture
def duplex_property() -> Property:
    """A two-unit property with explicit units."""
    return Property(
        id="dx-1",
        address="40 Oak Ave",
        door_count=2,
        climate_zone="Pacific Northwest",
        units=[Unit(unit_id="Upper", floor=2), Unit(unit_id="Lower", floor=1)],
    )


@pytest.fixture
def fourplex_property() -> Property:
    """A four-door property with synthesized units."""
    return Property(id="mu-1", address="7 Pine Rd", door_count=4, climate_zone="Northeast")


@pytest.fixture
def per_unit_template() -> Template:
    """A per-unit seasonal template."""
    return make_template()


@pytest.fixture
def today() -> date:
    """Fixed reference day (a Monday)."""
    return date(2025, 3, 10)
