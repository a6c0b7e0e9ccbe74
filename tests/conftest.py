from unittest.mock import Mock

import pytest
import simpy

from geo.fix import Fix
from geo.location_feed import LocationFeed
from tariff.models import ModifierSet, TripSelection
from tests.factories import make_fix
from trips.lifecycle import TripLifecycle


@pytest.fixture
def env() -> simpy.Environment:
    return simpy.Environment()


@pytest.fixture
def origin_fix() -> Fix:
    return make_fix()


@pytest.fixture
def feed() -> LocationFeed:
    return LocationFeed()


@pytest.fixture
def lifecycle(env: simpy.Environment, feed: LocationFeed) -> TripLifecycle:
    """Idle lifecycle watching a device feed that already has a fix."""
    feed.push(make_fix())
    return TripLifecycle(env=env, fix_source=feed)


@pytest.fixture
def normal_selection() -> TripSelection:
    return TripSelection()


@pytest.fixture
def no_modifiers() -> ModifierSet:
    return ModifierSet()


@pytest.fixture
def state_listener() -> Mock:
    return Mock()
