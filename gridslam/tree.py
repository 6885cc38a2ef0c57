"""Trajectory trees shared between particles, and weight propagation over them."""

from __future__ import annotations

from typing import Any, Iterable, Iterator

from .geometry import Pose

_TOLERANCE = 0.0001


class TrajectoryNode:
    """A pose in a particle's trajectory.

    ``children`` counts the nodes that name this one as their parent.
    """

    __slots__ = (
        "pose",
        "weight",
        "parent",
        "children",
        "reading",
        "gweight",
        "acc_weight",
        "visit_counter",
    )

    def __init__(
        self,
        pose: Pose,
        weight: float = 0.0,
        parent: TrajectoryNode | None = None,
        children: int = 0,
    ) -> None:
        self.pose = pose
        self.weight = weight
        self.parent = parent
        self.children = children
        self.reading: Any = None
        self.gweight = 0.0
        self.acc_weight = 0.0
        self.visit_counter = 0
        if parent is not None:
            parent.children += 1

    def path(self) -> Iterator[TrajectoryNode]:
        """Yield this node and then each ancestor up to the root."""
        node: TrajectoryNode | None = self
        while node is not None:
            yield node
            node = node.parent

    def _duplicate(self) -> TrajectoryNode:
        twin = TrajectoryNode.__new__(TrajectoryNode)
        for name in self.__slots__:
            setattr(twin, name, getattr(self, name))
        return twin


def reset_tree(leaves: Iterable[TrajectoryNode]) -> None:
    """Clear the accumulated weights and visit counts on every path."""
    for leaf in leaves:
        for node in leaf.path():
            node.acc_weight = 0.0
            node.visit_counter = 0


def _propagate(node: TrajectoryNode | None, weight: float) -> float:
    while node is not None:
        node.visit_counter += 1
        node.acc_weight += weight
        if node.visit_counter > node.children:
            raise ValueError("node visited more often than it has children")
        if node.visit_counter != node.children:
            return 0.0
        weight = node.acc_weight
        node = node.parent
    return weight


def propagate_weights(leaves: Iterable[TrajectoryNode], weights: Iterable[float]) -> float:
    """Push normalized leaf weights up the tree; return the weight at the root.

    The tree must have been reset first. Raises ValueError when the leaf
    weights or the root weight do not sum to one.
    """
    leaves = list(leaves)
    weights = list(weights)
    if len(leaves) != len(weights):
        raise ValueError("one weight is needed for each leaf")
    root_weight = 0.0
    leaf_sum = 0.0
    for leaf, weight in zip(leaves, weights):
        leaf_sum += weight
        leaf.acc_weight = weight
        root_weight += _propagate(leaf.parent, weight)
    if abs(leaf_sum - 1.0) > _TOLERANCE or abs(root_weight - 1.0) > _TOLERANCE:
        raise ValueError(
            f"root weight {root_weight:g} and leaf weight sum {leaf_sum:g} must both be 1"
        )
    return root_weight


def copy_trajectories(leaves: Iterable[TrajectoryNode]) -> list[TrajectoryNode]:
    """Copy the trees behind ``leaves``, keeping shared ancestors shared.

    Every leaf gets its own copy; each ancestor is copied once.
    """
    copies: dict[TrajectoryNode, TrajectoryNode] = {}
    result = []
    for leaf in leaves:
        child = leaf._duplicate()
        result.append(child)
        original = leaf.parent
        while original is not None:
            existing = copies.get(original)
            if existing is not None:
                child.parent = existing
                break
            twin = original._duplicate()
            copies[original] = twin
            child.parent = twin
            child = twin
            original = original.parent
    return result