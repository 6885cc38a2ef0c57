import pytest

from gridslam.geometry import Pose
from gridslam.tree import (
    TrajectoryNode,
    copy_trajectories,
    propagate_weights,
    reset_tree,
)


def _tree():
    root = TrajectoryNode(Pose(0, 0, 0))
    a = TrajectoryNode(Pose(1, 0, 0), 0.0, root)
    b = TrajectoryNode(Pose(0, 1, 0), 0.0, root)
    l1 = TrajectoryNode(Pose(2, 0, 0), 0.0, a)
    l2 = TrajectoryNode(Pose(2, 1, 0), 0.0, a)
    l3 = TrajectoryNode(Pose(0, 2, 0), 0.0, b)
    return root, a, b, [l1, l2, l3]


def test_constructor_counts_children():
    root, a, b, leaves = _tree()
    assert root.children == 2
    assert a.children == 2
    assert b.children == 1
    assert [leaf.children for leaf in leaves] == [0, 0, 0]


def test_path_walks_to_root():
    root, a, _, leaves = _tree()
    assert list(leaves[0].path()) == [leaves[0], a, root]
    assert list(root.path()) == [root]


def test_propagate_weights_accumulates_up_the_tree():
    root, a, b, leaves = _tree()
    weights = [0.25, 0.25, 0.5]
    reset_tree(leaves)
    assert propagate_weights(leaves, weights) == pytest.approx(1.0)
    assert a.acc_weight == pytest.approx(weights[0] + weights[1])
    assert b.acc_weight == pytest.approx(weights[2])
    assert root.acc_weight == pytest.approx(1.0)
    assert root.visit_counter == root.children
    assert a.visit_counter == a.children


def test_reset_tree_clears_accumulators():
    root, a, b, leaves = _tree()
    reset_tree(leaves)
    propagate_weights(leaves, [0.25, 0.25, 0.5])
    reset_tree(leaves)
    for node in (root, a, b, *leaves):
        assert node.acc_weight == 0.0
        assert node.visit_counter == 0


def test_unnormalized_weights_raise():
    _, _, _, leaves = _tree()
    reset_tree(leaves)
    with pytest.raises(ValueError):
        propagate_weights(leaves, [0.5, 0.5, 0.5])


def test_mismatched_lengths_raise():
    _, _, _, leaves = _tree()
    reset_tree(leaves)
    with pytest.raises(ValueError):
        propagate_weights(leaves, [1.0])


def test_overvisited_node_raises():
    _, _, _, leaves = _tree()
    reset_tree(leaves)
    with pytest.raises(ValueError):
        propagate_weights([leaves[2], leaves[2]], [0.5, 0.5])


def test_copy_keeps_structure_with_new_objects():
    root, a, b, leaves = _tree()
    copies = copy_trajectories(leaves)
    assert len(copies) == 3
    for original, twin in zip(leaves, copies):
        originals = list(original.path())
        twins = list(twin.path())
        assert [n.pose for n in twins] == [n.pose for n in originals]
        assert [n.children for n in twins] == [n.children for n in originals]
        assert all(x is not y for x, y in zip(originals, twins))
    assert copies[0].parent is copies[1].parent
    assert copies[0].parent.parent is copies[2].parent.parent
    assert copies[2].parent is not b
    assert leaves[0].parent is a


def test_copy_supports_independent_propagation():
    root, _, _, leaves = _tree()
    reset_tree(leaves)
    copies = copy_trajectories(leaves)
    assert propagate_weights(copies, [0.25, 0.25, 0.5]) == pytest.approx(1.0)
    assert list(copies[0].path())[-1].acc_weight == pytest.approx(1.0)
    assert root.acc_weight == 0.0


def test_copy_gives_each_shared_leaf_its_own_node():
    root = TrajectoryNode(Pose(1, 2, 3))
    copies = copy_trajectories([root, root])
    assert copies[0] is not copies[1]
    assert copies[0].pose == root.pose
    assert copies[0].parent is None and copies[1].parent is None