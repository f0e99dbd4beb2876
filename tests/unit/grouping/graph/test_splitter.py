"""Tests for splitting friend groups that cannot be placed whole."""

from __future__ import annotations

from grouping.config import GroupingConfig
from grouping.graph.splitter import split_friend_group
from tests.fixtures.grouping_factories import create_camper, create_friend_group


def _setup(grades: list[int], config: GroupingConfig):
    members = [create_camper(f"c{i}", grade=g) for i, g in enumerate(grades)]
    lookup = {c.athlete_id: c for c in members}
    return create_friend_group(members, config=config), lookup


class TestSplitFriendGroup:
    """Test the greedy grade-ordered split."""

    def test_fitting_group_is_unchanged(self):
        """A group within the size limit comes back as one subgroup, even if it spans grades."""
        config = GroupingConfig(max_group_size=12, max_grade_spread=2)
        friend_group, lookup = _setup([0, 0, 5], config)

        assert split_friend_group(friend_group, lookup, config) == [["c0", "c1", "c2"]]

    def test_same_grade_splits_by_size(self):
        """Fifteen same-grade friends split 12 + 3."""
        config = GroupingConfig(max_group_size=12, max_grade_spread=2)
        friend_group, lookup = _setup([3] * 15, config)

        subgroups = split_friend_group(friend_group, lookup, config)

        assert [len(s) for s in subgroups] == [12, 3]
        assert subgroups[0] == [f"c{i}" for i in range(12)]

    def test_splits_on_grade_boundary(self):
        """A new subgroup starts when the spread limit would be passed."""
        config = GroupingConfig(max_group_size=3, max_grade_spread=1)
        friend_group, lookup = _setup([4, 1, 2, 1, 4], config)

        subgroups = split_friend_group(friend_group, lookup, config)

        assert subgroups == [["c1", "c3", "c2"], ["c0", "c4"]]

    def test_every_member_once_and_within_limits(self):
        """Subgroups partition the members and respect both limits."""
        config = GroupingConfig(max_group_size=4, max_grade_spread=1)
        grades = [0, 5, 1, 1, 2, 3, 3, 3, 3, 3, 4, 0]
        friend_group, lookup = _setup(grades, config)

        subgroups = split_friend_group(friend_group, lookup, config)

        flat = [m for s in subgroups for m in s]
        assert sorted(flat) == sorted(friend_group.member_ids)
        for subgroup in subgroups:
            sub_grades = [lookup[m].grade_validated for m in subgroup]
            assert len(subgroup) <= 4
            assert max(sub_grades) - min(sub_grades) <= 1

    def test_input_not_modified(self):
        """The friend group itself is left alone."""
        config = GroupingConfig(max_group_size=2)
        friend_group, lookup = _setup([1, 1, 1], config)
        before = friend_group.model_dump()

        split_friend_group(friend_group, lookup, config)

        assert friend_group.model_dump() == before
