from datetime import datetime, timedelta, timezone

import pytest

from membership import MembershipManager
from negotiation import NegotiationRouter
from registry import Registry


class FakeClock:
    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    return Registry(clock=clock)


@pytest.fixture
def membership(registry):
    return MembershipManager(registry)


@pytest.fixture
def router(registry):
    return NegotiationRouter(registry)


def payloads(envelopes):
    """(connection id, event dict) pairs, as they would go over the wire."""
    return [(e.connection_id, e.event.model_dump()) for e in envelopes]
