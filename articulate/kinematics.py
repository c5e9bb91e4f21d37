"""
kinematics.py
---------------

Numeric forward kinematics over a `KinematicTree`.

A link's world transform is its parent's world transform times
the parent joint's origin times the joint's motion, evaluated in
tree order so the parent is always known.
"""
import logging
import collections

import numpy as np

from .exceptions import KinematicError

log = logging.getLogger(__name__)


class JointState(object):
    """
    Current scalar state of every joint in a tree.

    Starts at zero for every joint, joints can not be
    added or removed afterwards.
    """

    def __init__(self, names):
        self._values = dict.fromkeys(names, 0.0)
        # joints changed since the last `clean`
        self._dirty = set()

    def __getitem__(self, name):
        try:
            return self._values[name]
        except KeyError:
            raise KinematicError(name) from None

    def __setitem__(self, name, value):
        if name not in self._values:
            raise KinematicError(name)
        value = float(value)
        if value != self._values[name]:
            self._values[name] = value
            self._dirty.add(name)

    def __contains__(self, name):
        return name in self._values

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def items(self):
        return self._values.items()

    def as_dict(self):
        return dict(self._values)

    @property
    def dirty(self):
        """
        Names of joints changed since the last recompute.
        """
        return frozenset(self._dirty)

    def clean(self):
        self._dirty.clear()


class ForwardKinematics(object):
    """
    Keeps the world transform of every link in step with
    the joint state.
    """

    # most recent unknown joint names kept in `errors`
    max_errors = 64

    def __init__(self, tree, anchor=None):
        """
        Parameters
        ------------
        tree : KinematicTree
          Validated tree, only read
        anchor : None or (4, 4) float
          World transform of the root link
        """
        self.status = 'uninitialized'
        self.tree = tree
        if anchor is None:
            anchor = np.eye(4)
        self.anchor = np.array(anchor, dtype=np.float64)
        self.state = JointState(j.name for j in tree.joints)

        # joints whose motion is not modeled
        self.warnings = []
        # unknown joint names seen by `update`, oldest dropped first
        self.errors = collections.deque(maxlen=self.max_errors)
        for joint in tree.joints:
            if joint.kind in ('planar', 'floating'):
                message = (f'{joint.kind} joint `{joint.name}` '
                           'is treated as fixed')
                log.warning(message)
                self.warnings.append(message)

        count = len(tree.links)
        # parent-to-child transform of each link at the current state
        self._local = np.tile(np.eye(4), (count, 1, 1))
        self._world = np.tile(np.eye(4), (count, 1, 1))
        self.status = 'built'

    def update(self, values):
        """
        Set the state of some joints.

        Unknown joint names are logged and skipped.

        Parameters
        ------------
        values : dict
          Joint name to angle in radians or displacement in meters

        Returns
        ------------
        errors : (n,) KinematicError
          One per skipped name
        """
        errors = []
        for name, value in values.items():
            try:
                self.state[name] = value
            except KinematicError as E:
                log.warning('ignoring state for %s', E)
                errors.append(E)
        self.errors.extend(errors)
        return errors

    def recompute(self, full=False):
        """
        Bring world transforms up to date with the joint state.

        Only the subtrees below changed joints are recomputed unless
        `full` is set, the result is identical either way.

        Parameters
        ------------
        full : bool
          Recompute every link from the root

        Returns
        ------------
        changed : (n,) str
          Names of links whose transform was recomputed
        """
        tree = self.tree
        if full or self.status != 'posed':
            joints = range(len(tree.joints))
            indices = np.arange(len(tree.links))
        else:
            joints = sorted(tree.joint_index[n] for n in self.state.dirty)
            if len(joints) == 0:
                return []
            inside = np.zeros(len(tree.links), dtype=bool)
            for j in joints:
                inside[tree.subtree(j + 1)] = True
            indices = np.nonzero(inside)[0]

        for j in joints:
            joint = tree.joints[j]
            self._local[j + 1] = joint.transform(self.state[joint.name])

        world = self._world
        parents = tree.parents
        for i in indices:
            if i == 0:
                world[0] = self.anchor
            else:
                world[i] = np.dot(world[parents[i]], self._local[i])

        self.state.clean()
        self.status = 'posed'
        return [tree.links[i].name for i in indices]

    def pose(self, link):
        """
        World transform of one link.

        Parameters
        ------------
        link : str
          Link name

        Returns
        ------------
        matrix : (4, 4) float
          Link-to-world transform
        """
        self._ensure()
        return self._world[self.tree.link_index[link]].copy()

    def poses(self):
        """
        World transform of every link.

        Returns
        ------------
        poses : dict
          Link name to (4, 4) float
        """
        self._ensure()
        return {name: self._world[i].copy()
                for i, name in enumerate(self.tree.order)}

    @property
    def transforms(self):
        """
        World transforms in tree order.

        Returns
        ------------
        transforms : (n, 4, 4) float
          Read-only view, `transforms[i]` is `tree.links[i]`
        """
        self._ensure()
        view = self._world.view()
        view.flags.writeable = False
        return view

    def _ensure(self):
        if self.status != 'posed' or len(self.state.dirty) > 0:
            self.recompute()
