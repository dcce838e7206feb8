"""Shared fixtures: a file-backed store under tmp_path with a controllable clock."""

import pytest

from playlist_recs import EdgeStore, RecsConfig, RecsEngine

DAY = 24 * 60 * 60
START_TS = 1_700_000_000


class FakeClock:
    """Callable clock returning a fixed Unix timestamp that tests can advance."""

    def __init__(self, now: int = START_TS):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: int = 0, days: int = 0) -> None:
        self.now += seconds + days * DAY


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path, clock):
    s = EdgeStore.open(tmp_path / "recs.db", clock=clock)
    yield s
    s.close()


@pytest.fixture
def config():
    return RecsConfig()


@pytest.fixture
def engine(store, config):
    return RecsEngine(store=store, enabled=True, config=config)
