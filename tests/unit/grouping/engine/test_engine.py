"""
Tests for full grouping runs.

Covers the end-to-end placement scenarios: clean even split, oversized friend
group, friend group spanning too many grades, conservation, friend group
cohesion, preserved overrides and structural input errors.
"""

from __future__ import annotations

import pytest

from grouping.config import GroupingConfig, GroupingInputError
from grouping.engine.engine import GroupingEngine, run_grouping_algorithm
from grouping.engine.placement import OVERRIDE_REASON
from grouping.models import AssignmentType, GroupingInput
from grouping.violations import ViolationSeverity, ViolationType
from tests.fixtures.grouping_factories import create_camper, create_friend_group


def violations_of(output, violation_type):
    return [v for v in output.violations if v.violation_type == violation_type]


class TestCleanEvenSplit:
    """Ten solo campers across five groups."""

    @pytest.fixture
    def output(self):
        grades = [0, 0, 1, 1, 2, 2, 3, 3, 4, 4]
        campers = [create_camper(f"c{i}", grade=g) for i, g in enumerate(grades)]
        config = GroupingConfig(num_groups=5, max_group_size=12, max_grade_spread=2)
        return run_grouping_algorithm(GroupingInput(campers=campers, config=config))

    def test_two_per_group(self, output):
        """Every group ends up with exactly two campers."""
        assert [g.size for g in output.groups] == [2, 2, 2, 2, 2]

    def test_no_violations(self, output):
        """The run is clean and successful."""
        assert output.violations == []
        assert output.warnings == []
        assert output.success is True

    def test_spreads_within_limit(self, output):
        """No group spans more than two grades."""
        assert all(g.grade_spread <= 2 for g in output.groups)

    def test_stats(self, output):
        """Stats reflect a perfectly balanced auto placement."""
        assert output.stats.total_campers == 10
        assert output.stats.campers_auto_placed == 10
        assert output.stats.average_group_size == 2.0
        assert output.stats.group_size_variance == 0.0
        assert output.stats.balance_moves > 0

    def test_balanced_reason(self, output):
        """Campers moved by the balancer say so."""
        balanced = [a for a in output.assignments if a.reason.endswith("(balanced)")]

        assert len(balanced) == output.stats.balance_moves


class TestOversizedFriendGroup:
    """Fifteen same-grade friends with a group limit of twelve."""

    @pytest.fixture
    def run(self):
        config = GroupingConfig(num_groups=5, max_group_size=12, max_grade_spread=2)
        campers = [create_camper(f"f{i:02d}", grade=3) for i in range(15)]
        friend_group = create_friend_group(campers, config=config)
        output = run_grouping_algorithm(GroupingInput(campers=campers, friend_groups=[friend_group], config=config))
        return campers, output

    def test_split_twelve_and_three(self, run):
        """The group is split 12 + 3 and no group exceeds twelve."""
        _, output = run

        sizes = sorted((g.size for g in output.groups if g.size), reverse=True)
        assert sizes == [12, 3]
        assert all(g.size <= 12 for g in output.groups)

    def test_split_warning_names_all_members(self, run):
        """One split warning names all fifteen campers."""
        campers, output = run

        [split] = violations_of(output, ViolationType.FRIEND_GROUP_SPLIT)
        assert split.severity == ViolationSeverity.WARNING
        assert sorted(split.camper_ids) == sorted(c.athlete_id for c in campers)

    def test_too_large_warning(self, run):
        """The oversize is reported before splitting."""
        _, output = run

        [too_large] = violations_of(output, ViolationType.FRIEND_GROUP_TOO_LARGE)
        assert too_large.member_count == 15
        assert too_large.id == "v-1"

    def test_still_successful(self, run):
        """Warnings alone do not fail a run."""
        _, output = run

        assert output.success is True
        assert output.stats.friend_groups_split == 1
        assert output.stats.warnings == 2
        assert len(output.warnings) == 2

    def test_members_carry_split_cause(self, run):
        """Every member's assignment records the split."""
        _, output = run

        assert all(ViolationType.FRIEND_GROUP_SPLIT in a.caused_violations for a in output.assignments)


class TestGradeSpreadFriendGroup:
    """A friend group spanning K and 5th grade."""

    @pytest.fixture
    def run(self):
        config = GroupingConfig(max_grade_spread=2)
        members = [create_camper("a", grade=0), create_camper("b", grade=0), create_camper("c", grade=5)]
        friend_group = create_friend_group(members, config=config)
        output = run_grouping_algorithm(GroupingInput(campers=members, friend_groups=[friend_group], config=config))
        return friend_group, output

    def test_cannot_be_placed_intact(self, run):
        """The friend group is flagged up front."""
        friend_group, _ = run

        assert friend_group.can_be_placed_intact is False

    def test_grade_spread_violation_names_members(self, run):
        """A hard grade-spread violation references the friend group's members."""
        friend_group, output = run

        [violation] = violations_of(output, ViolationType.GRADE_SPREAD_EXCEEDED)
        assert violation.severity == ViolationSeverity.HARD
        assert sorted(violation.camper_ids) == sorted(friend_group.member_ids)
        assert violation.friend_group_id == friend_group.id
        assert output.success is False
        assert output.stats.constraint_violations == 1


class TestConservation:
    """Every input camper ends up in exactly one group or in the unplaced list."""

    @pytest.mark.parametrize("camper_count", [0, 1, 23, 75])
    def test_union_equals_input(self, camper_count):
        """No camper is lost or duplicated, even past total capacity."""
        campers = [
            create_camper(f"c{i}", grade=i % 7, friend_ids=[f"c{i + 1}"] if i % 4 == 0 else [])
            for i in range(camper_count)
        ]
        config = GroupingConfig(num_groups=5, max_group_size=12)

        output = run_grouping_algorithm(GroupingInput(campers=campers, config=config))

        placed = [cid for g in output.groups for cid in g.camper_ids]
        assert len(placed) == len(set(placed))
        assert sorted(placed + output.unplaced_camper_ids) == sorted(c.athlete_id for c in campers)
        assert len(output.assignments) == camper_count

    def test_over_capacity_is_reported(self):
        """More campers than seats still places everyone, with hard size violations."""
        campers = [create_camper(f"c{i}", grade=3) for i in range(13)]
        config = GroupingConfig(num_groups=1, max_group_size=12)

        output = run_grouping_algorithm(GroupingInput(campers=campers, config=config))

        assert output.groups[0].size == 13
        assert output.unplaced_camper_ids == []
        assert violations_of(output, ViolationType.SIZE_EXCEEDED)
        assert output.success is False
        assert output.groups[0].size_violation is True


class TestFriendGroupCohesion:
    """Feasible friend groups are never split."""

    def test_feasible_groups_stay_together(self):
        """Every friend group within both limits lands in one group."""
        config = GroupingConfig(num_groups=4, max_group_size=8, max_grade_spread=2)
        fg_a = [create_camper(f"a{i}", grade=2) for i in range(5)]
        fg_b = [create_camper(f"b{i}", grade=4 + i % 2) for i in range(4)]
        fg_c = [create_camper(f"c{i}", grade=0) for i in range(3)]
        solos = [create_camper(f"s{i}", grade=i % 6) for i in range(12)]
        friend_groups = [
            create_friend_group(fg_a, 1, config),
            create_friend_group(fg_b, 2, config),
            create_friend_group(fg_c, 3, config),
        ]

        output = run_grouping_algorithm(
            GroupingInput(campers=fg_a + fg_b + fg_c + solos, friend_groups=friend_groups, config=config)
        )

        for friend_group in friend_groups:
            homes = {output.group_for(m).id for m in friend_group.member_ids}
            assert len(homes) == 1, friend_group.id
        assert output.stats.friend_groups_placed_intact == 3
        assert violations_of(output, ViolationType.FRIEND_GROUP_SPLIT) == []


class TestManualOverrides:
    """Preserved manual placements."""

    def _input(self, preserve: bool, assignments: dict[str, str]):
        campers = [create_camper(f"c{i}", grade=3, assigned_group_id="group-1") for i in range(6)]
        return GroupingInput(
            campers=campers,
            config=GroupingConfig(num_groups=3),
            preserve_manual_overrides=preserve,
            existing_assignments=assignments,
        )

    def test_overrides_pinned_and_not_balanced(self):
        """Pinned campers stay put even when their group is over target."""
        assignments = {f"c{i}": "group-3" for i in range(4)}

        output = run_grouping_algorithm(self._input(True, assignments))

        group_3 = output.group_for("c0")
        assert group_3.id == "group-3"
        assert all(cid in group_3.camper_ids for cid in assignments)
        pinned = [a for a in output.assignments if a.camper_id in assignments]
        assert all(a.assignment_type == AssignmentType.MANUAL for a in pinned)
        assert all(a.reason == OVERRIDE_REASON for a in pinned)
        assert output.phase_log["phases"]["overrides"] == ["Preserved 4 manual override(s)"]

    def test_overrides_ignored_when_not_preserving(self):
        """Without the flag existing assignments are ignored."""
        output = run_grouping_algorithm(self._input(False, {"c0": "group-3"}))

        assert all(a.assignment_type == AssignmentType.AUTO for a in output.assignments)

    def test_previous_group_recorded(self):
        """Assignments remember where the camper was before the run."""
        output = run_grouping_algorithm(self._input(False, {}))

        assert all(a.previous_group_id == "group-1" for a in output.assignments)

    def test_unknown_override_group(self):
        """An override pointing at a group that does not exist fails up front."""
        with pytest.raises(GroupingInputError, match="group-9"):
            run_grouping_algorithm(self._input(True, {"c0": "group-9"}))

    def test_unknown_override_camper(self):
        """An override for someone not on the roster fails up front."""
        with pytest.raises(GroupingInputError, match="ghost"):
            run_grouping_algorithm(self._input(True, {"ghost": "group-1"}))


class TestStructuralErrors:
    """Precondition failures raise before anything is placed."""

    def test_duplicate_camper_ids(self):
        """The same athlete twice is rejected."""
        campers = [create_camper("a"), create_camper("a")]

        with pytest.raises(GroupingInputError, match="Duplicate"):
            run_grouping_algorithm(GroupingInput(campers=campers))

    def test_friend_group_with_unknown_member(self):
        """Friend groups must only reference roster campers."""
        a, ghost = create_camper("a"), create_camper("ghost")

        with pytest.raises(GroupingInputError, match="ghost"):
            run_grouping_algorithm(GroupingInput(campers=[a], friend_groups=[create_friend_group([a, ghost])]))

    def test_camper_in_two_friend_groups(self):
        """Friend groups must be disjoint."""
        a, b, c = create_camper("a"), create_camper("b"), create_camper("c")
        friend_groups = [create_friend_group([a, b], 1), create_friend_group([a, c], 2)]

        with pytest.raises(GroupingInputError, match="fg-1 and fg-2"):
            run_grouping_algorithm(GroupingInput(campers=[a, b, c], friend_groups=friend_groups))

    def test_inputs_not_modified(self):
        """A run leaves the caller's campers untouched."""
        campers = [create_camper(f"c{i}", grade=i % 4) for i in range(8)]
        before = [c.model_dump() for c in campers]

        run_grouping_algorithm(GroupingInput(campers=campers, config=GroupingConfig(num_groups=2)))

        assert [c.model_dump() for c in campers] == before


class TestPhaseLog:
    """The run explains itself."""

    def test_summary_has_phases(self):
        """Phase notes are returned on the output."""
        output = run_grouping_algorithm(GroupingInput(campers=[create_camper("a")]))

        assert set(output.phase_log["phases"]) >= {"friend_groups", "solo", "balance", "validate"}
        assert "decisions" not in output.phase_log

    def test_debug_mode_keeps_decisions(self):
        """Debug mode records every placement decision."""
        output = GroupingEngine(GroupingInput(campers=[create_camper("a")]), debug_mode=True).run()

        assert len(output.phase_log["decisions"]) == 1
        assert "a -> group-1" in output.phase_log["decisions"][0]
