import pytest

from helpers import FakeClock, make_block


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scenario_blocks():
    """start -> move(10) -> repeat(3) { turn_right(90) }"""
    return [
        make_block("start", "onStart", x=0, y=0, children=["move"]),
        make_block("move", "moveForward", x=0, y=40, children=["loop"], steps=10),
        make_block("loop", "repeat", x=0, y=80, children=["turn"], times=3),
        make_block("turn", "turnRight", x=40, y=120, degrees=90),
    ]
