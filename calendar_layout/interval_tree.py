"""
AVL interval tree indexing events by their ``[start, end]`` span.

Each node is augmented with ``max_end``, the latest end in its subtree, so a
range query can skip subtrees that end before the range begins.
"""

from typing import Any, Generic, Iterator, Optional, TypeVar

# Any totally ordered coordinate (datetime in practice)
T = TypeVar('T')


class IntervalNode(Generic[T]):
    """Tree node, also the handle returned by ``insert`` and taken by ``remove``."""
    __slots__ = ['start', 'end', 'data', 'left', 'right', 'parent', 'max_end', 'height']

    def __init__(self, start: T, end: T, data: Any):
        self.start: T = start
        self.end: T = end
        self.data: Any = data
        self.left: Optional['IntervalNode[T]'] = None
        self.right: Optional['IntervalNode[T]'] = None
        self.parent: Optional['IntervalNode[T]'] = None
        self.max_end: T = end
        self.height: int = 1

    def __repr__(self):
        return f"IntervalNode({self.start!r}, {self.end!r}, {self.data!r})"


def _height(node: Optional[IntervalNode]) -> int:
    return node.height if node else 0


class IntervalTree(Generic[T]):
    def __init__(self):
        self.root: Optional[IntervalNode[T]] = None
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[IntervalNode[T]]:
        """In-order walk: nodes sorted by start."""
        stack = []
        node = self.root
        while stack or node:
            while node:
                stack.append(node)
                node = node.left
            node = stack.pop()
            yield node
            node = node.right

    def clear(self):
        self.root = None
        self._size = 0

    # --- Balancing ---

    def _refresh(self, node: IntervalNode[T]):
        node.height = 1 + max(_height(node.left), _height(node.right))
        latest = node.end
        for child in (node.left, node.right):
            if child and child.max_end > latest:
                latest = child.max_end
        node.max_end = latest

    def _replace_child(self, parent: Optional[IntervalNode[T]], old: IntervalNode[T],
                       new: Optional[IntervalNode[T]]):
        if parent is None:
            self.root = new
        elif parent.left is old:
            parent.left = new
        else:
            parent.right = new
        if new:
            new.parent = parent

    def _rotate_left(self, x: IntervalNode[T]):
        y = x.right
        x.right = y.left
        if y.left:
            y.left.parent = x
        self._replace_child(x.parent, x, y)
        y.left = x
        x.parent = y
        self._refresh(x)
        self._refresh(y)

    def _rotate_right(self, y: IntervalNode[T]):
        x = y.left
        y.left = x.right
        if x.right:
            x.right.parent = y
        self._replace_child(y.parent, y, x)
        x.right = y
        y.parent = x
        self._refresh(y)
        self._refresh(x)

    def _rebalance_upwards(self, node: Optional[IntervalNode[T]]):
        while node:
            self._refresh(node)
            balance = _height(node.left) - _height(node.right)
            if balance > 1:
                if _height(node.left.left) < _height(node.left.right):
                    self._rotate_left(node.left)
                self._rotate_right(node)
                node = node.parent
            elif balance < -1:
                if _height(node.right.right) < _height(node.right.left):
                    self._rotate_right(node.right)
                self._rotate_left(node)
                node = node.parent
            node = node.parent

    # --- Mutation ---

    def insert(self, start: T, end: T, data: Any) -> IntervalNode[T]:
        """Add ``[start, end]`` carrying ``data``; equal starts go to the right."""
        if end < start:
            raise ValueError(f"Interval end {end!r} is before start {start!r}")
        node = IntervalNode(start, end, data)
        self._size += 1
        if self.root is None:
            self.root = node
            return node

        parent = self.root
        while True:
            branch = 'left' if start < parent.start else 'right'
            child = getattr(parent, branch)
            if child is None:
                setattr(parent, branch, node)
                node.parent = parent
                break
            parent = child

        self._rebalance_upwards(parent)
        return node

    def remove(self, node: IntervalNode[T]):
        """
        Remove the interval held by ``node``.

        Nodes keep their identity: the handle of a different interval is
        never invalidated by this call.
        """
        if node.left and node.right:
            # Splice the in-order successor into node's place
            successor = node.right
            while successor.left:
                successor = successor.left
            rebalance_from = successor.parent if successor.parent is not node else successor

            self._replace_child(successor.parent, successor, successor.right)
            successor.left, successor.right = node.left, node.right
            if successor.left:
                successor.left.parent = successor
            if successor.right:
                successor.right.parent = successor
            self._replace_child(node.parent, node, successor)
            successor.height = node.height
        else:
            rebalance_from = node.parent
            self._replace_child(node.parent, node, node.left or node.right)

        node.left = node.right = node.parent = None
        self._size -= 1
        self._rebalance_upwards(rebalance_from)

    # --- Queries ---

    def iter_intersecting(self, start: T, end: T) -> Iterator[IntervalNode[T]]:
        """Nodes whose interval shares at least one point with ``[start, end]``, by start."""
        stack = []
        node = self.root
        while stack or node:
            while node and node.max_end >= start:
                stack.append(node)
                node = node.left
            if not stack:
                return
            node = stack.pop()
            if node.start > end:
                return
            if node.end >= start:
                yield node
            node = node.right

    def iter_containing(self, moment: T) -> Iterator[IntervalNode[T]]:
        """Nodes whose interval covers ``moment``."""
        return self.iter_intersecting(moment, moment)

    # --- Debug Tool ---

    def verify_integrity(self):
        """Raise RuntimeError if AVL balance, max_end or parent links are broken."""
        def _walk(node, parent):
            if node is None:
                return 0, None
            if node.parent is not parent:
                raise RuntimeError(f"Broken parent link at {node.start}")
            left_h, left_max = _walk(node.left, node)
            right_h, right_max = _walk(node.right, node)

            if abs(left_h - right_h) > 1:
                raise RuntimeError(f"AVL violation at {node.start}")
            expected_max = max(m for m in (node.end, left_max, right_max) if m is not None)
            if node.max_end != expected_max:
                raise RuntimeError(f"max_end violation at {node.start}")
            return 1 + max(left_h, right_h), expected_max

        _walk(self.root, None)
