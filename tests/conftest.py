from __future__ import annotations

import pytest

from bracket_engine import Competitor, build, seed


def make_competitor(index: int) -> Competitor:
    return Competitor(competitor_id=f"p{index}", name=f"Player {index}", seed=index)


def make_field(count: int) -> list[Competitor]:
    return [make_competitor(index) for index in range(1, count + 1)]


@pytest.fixture
def field_of():
    return make_field


@pytest.fixture
def four_player_bracket():
    return build(seed(make_field(4)))


@pytest.fixture
def eight_player_bracket():
    return build(seed(make_field(8)))
