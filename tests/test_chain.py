"""Tests for building and querying the kinematic tree."""

import numpy as np
import pytest

from articulate.chain import build_tree
from articulate.exchange import parse_urdf
from articulate.joint import Joint
from articulate.kinematics import ForwardKinematics
from articulate.link import Link
from articulate.exceptions import (TreeBuildError,
                                   NoRootFound,
                                   MultipleRoots,
                                   CycleDetected,
                                   DanglingJointReference,
                                   DuplicateParent)


def links(*names):
    return [Link(name) for name in names]


def fixed(name, parent, child):
    return Joint(name=name, kind='fixed', connects=(parent, child))


def test_build_arm(arm_urdf):
    """Declaration order does not matter, parents always come first."""
    description = parse_urdf(arm_urdf)
    tree = build_tree(description.links, description.joints)

    assert tree.root == 'base_link'
    assert tree.order == ('base_link', 'upper', 'sensor', 'forearm',
                          'gripper')
    assert [j.name for j in tree.joints] == [
        'shoulder', 'mount', 'elbow', 'wrist']
    np.testing.assert_array_equal(tree.parents, [-1, 0, 0, 1, 3])
    np.testing.assert_array_equal(tree.depth, [0, 1, 1, 2, 3])
    assert tree.children == ((0, 1), (2,), (), (3,), ())
    for i in range(1, len(tree.links)):
        assert tree.parents[i] < i
        assert tree.joints[i - 1].child == tree.links[i].name

    assert tree.movable == ['shoulder', 'elbow', 'wrist']
    assert tree.parent_joint('base_link') is None
    assert tree.parent_joint('forearm').name == 'elbow'


def test_subtree(arm_urdf):
    tree = build_tree(*parse_urdf(arm_urdf)[1:3])
    names = [tree.order[i] for i in tree.subtree('upper')]
    assert names == ['upper', 'forearm', 'gripper']
    assert list(tree.subtree('sensor')) == [2]
    assert len(tree.subtree(0)) == len(tree)


def test_paths_and_graph(arm_urdf):
    tree = build_tree(*parse_urdf(arm_urdf)[1:3])
    paths = tree.paths()
    assert paths['base_link'] == []
    assert paths['gripper'] == ['shoulder', 'elbow', 'wrist']
    assert paths['sensor'] == ['mount']

    graph = tree.graph()
    assert set(graph.nodes) == set(tree.order)
    assert graph.get_edge_data('upper', 'forearm')['joint'] == 'elbow'


def test_limits(arm_urdf):
    tree = build_tree(*parse_urdf(arm_urdf)[1:3])
    np.testing.assert_allclose(
        tree.limits, [[-1.5, 1.5], [0, 0.25], [-np.pi, np.pi]])


def test_single_link():
    tree = build_tree(links('only'), [])
    assert tree.root == 'only'
    assert len(tree.joints) == 0
    assert tree.limits.shape == (0, 2)


def test_two_links_no_joints():
    """Two unconnected links are ambiguous, roots in declaration order."""
    with pytest.raises(MultipleRoots) as E:
        build_tree(links('b', 'a'), [])
    assert E.value.roots == ['b', 'a']


def test_dangling_reference():
    with pytest.raises(DanglingJointReference) as E:
        build_tree(links('a', 'b'), [fixed('j', 'a', 'c')])
    assert E.value.joint == 'j'
    assert E.value.link == 'c'

    with pytest.raises(DanglingJointReference):
        build_tree(links('a', 'b'), [fixed('j', 'ghost', 'b')])


def test_duplicate_parent():
    with pytest.raises(DuplicateParent) as E:
        build_tree(links('a', 'b', 'c'),
                   [fixed('j1', 'a', 'c'), fixed('j2', 'b', 'c')])
    assert E.value.link == 'c'
    assert E.value.joints == ['j1', 'j2']


def test_no_root():
    with pytest.raises(NoRootFound) as E:
        build_tree(links('a', 'b'),
                   [fixed('j1', 'a', 'b'), fixed('j2', 'b', 'a')])
    assert set(E.value.cycle) == {'a', 'b'}

    with pytest.raises(NoRootFound):
        build_tree([], [])


def test_cycle_detached_from_root():
    """One root plus a loop that can not be reached from it."""
    with pytest.raises(CycleDetected) as E:
        build_tree(links('root', 'a', 'b', 'c'),
                   [fixed('j0', 'root', 'a'),
                    fixed('j1', 'b', 'c'),
                    fixed('j2', 'c', 'b')])
    assert set(E.value.cycle) == {'b', 'c'}

    with pytest.raises(CycleDetected):
        build_tree(links('root', 'a'), [fixed('j', 'a', 'a')])


def test_duplicate_names():
    with pytest.raises(TreeBuildError):
        build_tree(links('a', 'a'), [])
    with pytest.raises(TreeBuildError):
        build_tree(links('a', 'b', 'c'),
                   [fixed('j', 'a', 'b'), fixed('j', 'a', 'c')])


def test_symbolic_matches_numeric(arm_urdf):
    """The sympy lambdas agree with the numeric engine."""
    tree = build_tree(*parse_urdf(arm_urdf)[1:3])
    lambdas = tree.forward_kinematics_lambda()
    assert set(lambdas.keys()) == set(tree.order)

    kinematics = ForwardKinematics(tree)
    values = [0.4, 0.1, -1.2]
    kinematics.update(dict(zip(tree.movable, values)))
    for name, pose in kinematics.poses().items():
        np.testing.assert_allclose(
            np.array(lambdas[name](*values), dtype=np.float64),
            pose, atol=1e-9)
