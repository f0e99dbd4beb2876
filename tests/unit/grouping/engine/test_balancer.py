"""Tests for post-placement size balancing."""

from __future__ import annotations

from grouping.config import GroupingConfig
from grouping.engine.balancer import balance_groups
from grouping.engine.state import initialize_groups
from grouping.models import GroupAssignment
from tests.fixtures.grouping_factories import create_camper

CONFIG = GroupingConfig(num_groups=3, max_group_size=12, max_grade_spread=2)


def setup_groups(placements: dict[int, list[tuple[str, int]]]):
    """Build run state from {group index: [(camper id, grade), ...]}."""
    groups = initialize_groups(3)
    lookup = {}
    assignments = {}
    for index, members in placements.items():
        group = groups[index]
        for camper_id, grade in members:
            lookup[camper_id] = create_camper(camper_id, grade=grade)
            group.add(camper_id, grade)
            assignments[camper_id] = GroupAssignment(
                camper_id=camper_id,
                group_id=group.id,
                group_number=group.group_number,
                reason="Best fit by grade and balance",
            )
    return groups, lookup, assignments


class TestBalanceGroups:
    """Test the first-eligible-destination balancer."""

    def test_moves_toward_target(self):
        """Five campers in one group spread out to sizes 2/2/1."""
        groups, lookup, assignments = setup_groups({0: [(c, 3) for c in "abcde"]})

        moves = balance_groups(groups, lookup, CONFIG, assignments, locked_ids=set())

        assert moves == 3
        assert [g.camper_ids for g in groups] == [["d", "e"], ["a", "b"], ["c"]]

    def test_updates_assignment_records(self):
        """Moved campers point at their new group with a balanced reason."""
        groups, lookup, assignments = setup_groups({0: [(c, 3) for c in "abcde"]})

        balance_groups(groups, lookup, CONFIG, assignments, locked_ids=set())

        assert assignments["a"].group_id == "group-2"
        assert assignments["a"].group_number == 2
        assert assignments["a"].reason == "Best fit by grade and balance (balanced)"
        assert assignments["d"].reason == "Best fit by grade and balance"

    def test_locked_campers_stay(self):
        """Locked campers are skipped; others move instead."""
        groups, lookup, assignments = setup_groups({0: [(c, 3) for c in "abcde"]})

        balance_groups(groups, lookup, CONFIG, assignments, locked_ids={"a", "b"})

        assert groups[0].camper_ids == ["a", "b"]

    def test_never_breaks_grade_spread(self):
        """No move is made that would push a destination past the spread limit."""
        groups, lookup, assignments = setup_groups(
            {0: [(c, 0) for c in "abcd"], 1: [("x", 3)], 2: [("y", 4)]}
        )

        moves = balance_groups(groups, lookup, CONFIG, assignments, locked_ids=set())

        assert moves == 0
        assert all(g.grade_spread <= CONFIG.max_grade_spread for g in groups)

    def test_balanced_input_is_untouched(self):
        """Nothing above target, nothing moves."""
        groups, lookup, assignments = setup_groups({0: [("a", 1)], 1: [("b", 1)], 2: [("c", 1)]})

        assert balance_groups(groups, lookup, CONFIG, assignments, locked_ids=set()) == 0

    def test_empty_run(self):
        """No campers means no moves."""
        groups, lookup, assignments = setup_groups({})

        assert balance_groups(groups, lookup, CONFIG, assignments, locked_ids=set()) == 0
