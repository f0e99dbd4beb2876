"""Disjoint-set forest used to find friend groups."""

from __future__ import annotations

from collections.abc import Iterable


class UnionFind:
    """Union-find over string ids with path compression and union by rank.

    Every id passed to the constructor starts as its own singleton set, so
    isolated campers still come back as one-member components.
    """

    def __init__(self, elements: Iterable[str]):
        self._parent: dict[str, str] = {}
        self._rank: dict[str, int] = {}
        for elem in elements:
            self.add(elem)

    def __contains__(self, elem: str) -> bool:
        return elem in self._parent

    def __len__(self) -> int:
        return len(self._parent)

    def add(self, elem: str) -> None:
        """Add an element as a singleton set (no-op if already present)."""
        if elem not in self._parent:
            self._parent[elem] = elem
            self._rank[elem] = 0

    def find(self, elem: str) -> str:
        """Root of the set containing ``elem``, compressing the path on the way.

        Raises:
            KeyError: If ``elem`` was never added
        """
        root = elem
        while self._parent[root] != root:
            root = self._parent[root]

        while self._parent[elem] != root:
            self._parent[elem], elem = root, self._parent[elem]

        return root

    def union(self, x: str, y: str) -> bool:
        """Merge the sets containing x and y.

        Returns:
            True if two distinct sets were merged, False if already joined
        """
        root_x = self.find(x)
        root_y = self.find(y)
        if root_x == root_y:
            return False

        rank_x = self._rank[root_x]
        rank_y = self._rank[root_y]
        if rank_x < rank_y:
            self._parent[root_x] = root_y
        elif rank_x > rank_y:
            self._parent[root_y] = root_x
        else:
            self._parent[root_y] = root_x
            self._rank[root_x] = rank_x + 1
        return True

    def connected(self, x: str, y: str) -> bool:
        return self.find(x) == self.find(y)

    def components(self) -> dict[str, list[str]]:
        """All sets as root -> members.

        Components appear in the order their first member was added, and members
        keep insertion order, so results are deterministic for a given input order.
        """
        result: dict[str, list[str]] = {}
        for elem in self._parent:
            result.setdefault(self.find(elem), []).append(elem)
        return result
