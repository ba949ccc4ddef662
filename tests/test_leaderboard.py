"""Tests for the leaderboard tabs."""

import pytest

from chatlife.entities import Organism, Role
from chatlife.leaderboard import Leaderboard


def _organisms():
    return [
        Organism(0, 0, "A", id=1, generation=1, size=30.0, age=50.0, food_eaten=3),
        Organism(0, 0, "B", id=2, generation=3, size=16.0, age=10.0, food_eaten=9),
        Organism(0, 0, "C", id=3, generation=3, size=40.0, age=80.0, food_eaten=0),
        Organism(0, 0, "D", id=4, generation=9, size=50.0, age=500.0, alive=False),
        Organism(0, 0, "PREDATOR", id=5, role=Role.PREDATOR, generation=20, age=900.0),
    ]


class TestLeaderboard:
    def test_refreshes_on_interval(self):
        board = Leaderboard(update_interval=2.0)
        assert not board.update(1.0, _organisms())
        assert board.top("evolved") == []
        assert board.update(1.0, _organisms())
        assert board.top("evolved")

    def test_evolved_ranks_generation_then_sides(self):
        board = Leaderboard()
        board.refresh(_organisms())
        assert [e.organism_id for e in board.top("evolved")] == [3, 2, 1]
        assert board.top("evolved")[0].value == "G3 (9 sides)"

    def test_survival_and_food(self):
        board = Leaderboard()
        board.refresh(_organisms())
        assert [e.name for e in board.top("survival")] == ["C G3", "A G1", "B G3"]
        assert board.top("food_eaten")[0].value == "9 food"

    def test_size_limits_entries(self):
        board = Leaderboard(size=2)
        board.refresh(_organisms())
        assert len(board.top("survival")) == 2

    def test_unknown_tab(self):
        with pytest.raises(KeyError):
            Leaderboard().top("fastest")
