"""Tests for the numeric forward kinematics engine."""

import numpy as np
import pytest

from articulate.chain import build_tree
from articulate.exchange import parse_urdf
from articulate.kinematics import ForwardKinematics, JointState
from articulate.exceptions import KinematicError


def engine(text, **kwargs):
    return ForwardKinematics(build_tree(*parse_urdf(text)[1:3]), **kwargs)


def test_status(chain_urdf):
    kinematics = engine(chain_urdf)
    assert kinematics.status == 'built'
    kinematics.poses()
    assert kinematics.status == 'posed'


def test_zero_state_is_reference(arm_urdf):
    """All-zero state reproduces the composed joint origins."""
    kinematics = engine(arm_urdf)
    tree = kinematics.tree
    poses = kinematics.poses()

    expected = {tree.root: np.eye(4)}
    for i, joint in enumerate(tree.joints):
        parent = tree.order[tree.parents[i + 1]]
        expected[joint.child] = expected[parent] @ joint.origin
    for name in tree.order:
        np.testing.assert_allclose(poses[name], expected[name], atol=1e-12)

    # moving and moving back lands on the same reference pose
    kinematics.update({'shoulder': 1.0, 'elbow': 0.2, 'wrist': -2.0})
    kinematics.recompute()
    kinematics.update({'shoulder': 0.0, 'elbow': 0.0, 'wrist': 0.0})
    for name, pose in kinematics.poses().items():
        np.testing.assert_allclose(pose, expected[name], atol=1e-12)


def test_revolute_half_turn(chain_urdf):
    """Turning root->a by pi swings b around Z but leaves a in place."""
    kinematics = engine(chain_urdf)
    a_zero = kinematics.pose('a')
    b_zero = kinematics.pose('b')
    np.testing.assert_allclose(b_zero[:3, 3], [1, 0, 0.5], atol=1e-12)

    kinematics.update({'spin': np.pi})
    a = kinematics.pose('a')
    b = kinematics.pose('b')

    np.testing.assert_allclose(a[:3, 3], a_zero[:3, 3], atol=1e-12)
    np.testing.assert_allclose(b[:3, 3], [-1, 0, 0.5], atol=1e-12)
    # b relative to a has not changed
    np.testing.assert_allclose(np.linalg.inv(a) @ b,
                               np.linalg.inv(a_zero) @ b_zero,
                               atol=1e-12)


def test_prismatic(arm_urdf):
    kinematics = engine(arm_urdf)
    before = kinematics.pose('forearm')
    kinematics.update({'elbow': 0.25})
    after = kinematics.pose('forearm')
    # moves along the joint's Z axis expressed in the world
    np.testing.assert_allclose(after[:3, 3] - before[:3, 3],
                               before[:3, 2] * 0.25, atol=1e-12)
    np.testing.assert_allclose(after[:3, :3], before[:3, :3], atol=1e-12)


def test_subtree_matches_full(arm_urdf):
    """Recomputing only changed subtrees is bit-identical to a full pass."""
    partial = engine(arm_urdf)
    full = engine(arm_urdf)
    partial.recompute()

    random = np.random.RandomState(7)
    names = partial.tree.movable
    for _ in range(20):
        name = names[random.randint(len(names))]
        value = random.uniform(-2, 2)
        partial.update({name: value})
        full.update({name: value})

        changed = partial.recompute()
        full.recompute(full=True)

        index = partial.tree.link_index[partial.tree.joints[
            partial.tree.joint_index[name]].child]
        assert changed == [partial.tree.order[i]
                           for i in partial.tree.subtree(index)]
        np.testing.assert_array_equal(partial.transforms, full.transforms)


def test_recompute_nothing_changed(chain_urdf):
    kinematics = engine(chain_urdf)
    assert kinematics.recompute() == ['root', 'a', 'b']
    assert kinematics.recompute() == []
    # same value does not mark the joint dirty
    kinematics.update({'spin': 0.0})
    assert kinematics.recompute() == []
    assert kinematics.recompute(full=True) == ['root', 'a', 'b']


def test_unknown_joint(chain_urdf, caplog):
    kinematics = engine(chain_urdf)
    with caplog.at_level('WARNING'):
        errors = kinematics.update({'nope': 1.0, 'spin': 0.5})
    assert len(errors) == 1
    assert isinstance(errors[0], KinematicError)
    assert errors[0].joint == 'nope'
    assert 'nope' in caplog.text
    # the known joint still applied
    assert kinematics.state['spin'] == 0.5
    assert errors[0] in kinematics.errors


def test_fixed_state_ignored(chain_urdf):
    kinematics = engine(chain_urdf)
    before = kinematics.pose('b')
    kinematics.update({'weld': 3.0})
    np.testing.assert_array_equal(kinematics.pose('b'), before)


def test_planar_treated_as_fixed(caplog):
    text = """<robot name="p"><link name="a"/><link name="b"/>
    <joint name="slide" type="planar"><parent link="a"/><child link="b"/>
    <origin xyz="0 1 0"/></joint></robot>"""
    with caplog.at_level('WARNING'):
        kinematics = engine(text)
    assert 'slide' in caplog.text
    assert len(kinematics.warnings) == 1
    kinematics.update({'slide': 5.0})
    np.testing.assert_allclose(kinematics.pose('b')[:3, 3], [0, 1, 0])


def test_anchor(chain_urdf):
    anchor = np.eye(4)
    anchor[:3, 3] = [10, 0, 0]
    kinematics = engine(chain_urdf, anchor=anchor)
    np.testing.assert_allclose(kinematics.pose('root'), anchor)
    np.testing.assert_allclose(kinematics.pose('b')[:3, 3], [11, 0, 0.5])


def test_transforms_read_only(chain_urdf):
    kinematics = engine(chain_urdf)
    with pytest.raises(ValueError):
        kinematics.transforms[0, 0, 0] = 5.0


def test_joint_state():
    state = JointState(['a', 'b'])
    assert state['a'] == 0.0
    assert len(state) == 2
    state['a'] = 1
    assert state.dirty == {'a'}
    state.clean()
    assert state.dirty == frozenset()
    with pytest.raises(KinematicError):
        state['c'] = 1.0
    with pytest.raises(KinematicError):
        state['c']
    assert 'c' not in state


def test_unknown_joint_errors_bounded(chain_urdf):
    kinematics = engine(chain_urdf)
    for i in range(kinematics.max_errors + 10):
        kinematics.update({f'missing{i}': 1.0})
    assert len(kinematics.errors) == kinematics.max_errors
    # the oldest are dropped
    assert kinematics.errors[-1].joint == f'missing{kinematics.max_errors + 9}'
    assert kinematics.errors[0].joint == 'missing10'
