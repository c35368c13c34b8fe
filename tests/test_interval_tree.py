# File: tests/test_interval_tree.py
"""
Unit tests for the AVL interval tree.
"""

import random
import pytest

from calendar_layout.interval_tree import IntervalTree


def _brute_force(intervals, start, end):
    return sorted(data for s, e, data in intervals if s <= end and e >= start)


class TestIntervalTree:

    def test_empty_tree(self):
        tree = IntervalTree()

        assert len(tree) == 0
        assert list(tree) == []
        assert list(tree.iter_intersecting(0, 100)) == []
        tree.verify_integrity()

    def test_inclusive_intersection(self):
        tree = IntervalTree()
        tree.insert(10, 20, "a")
        tree.insert(20, 30, "b")
        tree.insert(31, 40, "c")

        assert [n.data for n in tree.iter_intersecting(20, 20)] == ["a", "b"]
        assert [n.data for n in tree.iter_intersecting(30, 31)] == ["b", "c"]
        assert [n.data for n in tree.iter_containing(35)] == ["c"]
        assert list(tree.iter_intersecting(41, 50)) == []

    def test_iteration_sorted_by_start(self):
        tree = IntervalTree()
        for start in [50, 10, 40, 20, 30]:
            tree.insert(start, start + 5, start)

        assert [n.data for n in tree] == [10, 20, 30, 40, 50]

    def test_reversed_interval_rejected(self):
        with pytest.raises(ValueError):
            IntervalTree().insert(5, 4, "bad")

    def test_sequential_inserts_stay_balanced(self):
        tree = IntervalTree()
        for i in range(1000):
            tree.insert(i, i + 1, i)

        tree.verify_integrity()
        assert tree.root.height <= 15

    def test_remove(self):
        tree = IntervalTree()
        nodes = {name: tree.insert(start, start + 10, name)
                 for name, start in [("a", 0), ("b", 5), ("c", 10), ("d", 15), ("e", 20)]}

        tree.remove(nodes["c"])
        tree.verify_integrity()

        assert len(tree) == 4
        assert [n.data for n in tree] == ["a", "b", "d", "e"]
        assert [n.data for n in tree.iter_intersecting(15, 15)] == ["b", "d"]
        # Handles of the remaining intervals stay valid
        assert nodes["d"].data == "d"
        tree.remove(nodes["d"])
        tree.verify_integrity()
        assert [n.data for n in tree] == ["a", "b", "e"]

    def test_clear(self):
        tree = IntervalTree()
        tree.insert(1, 2, "x")
        tree.clear()

        assert len(tree) == 0
        assert tree.root is None

    @pytest.mark.parametrize("seed", range(10))
    def test_matches_brute_force(self, seed):
        rng = random.Random(seed)
        tree = IntervalTree()
        intervals = []
        nodes = []

        for i in range(300):
            start = rng.randint(0, 1000)
            end = start + rng.randint(0, 50)
            intervals.append((start, end, i))
            nodes.append(tree.insert(start, end, i))

        for _ in range(100):
            index = rng.randrange(len(nodes))
            tree.remove(nodes.pop(index))
            intervals.pop(index)

        tree.verify_integrity()
        assert len(tree) == len(intervals)

        for _ in range(50):
            start = rng.randint(0, 1000)
            end = start + rng.randint(0, 100)
            found = sorted(n.data for n in tree.iter_intersecting(start, end))
            assert found == _brute_force(intervals, start, end)
