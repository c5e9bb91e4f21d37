"""
joint.py
----------

Joints connect a parent link to a child link with a transform
that depends on a single scalar state.
"""
import trimesh

import sympy as sp
import numpy as np

# every joint type the description format knows about
JOINT_KINDS = ('fixed',
               'revolute',
               'continuous',
               'prismatic',
               'planar',
               'floating')

# joint types whose motion is modeled here
MOVABLE_KINDS = ('revolute', 'continuous', 'prismatic')

# default slider range for joints that declare no limits
DEFAULT_BOUNDS = {'revolute': (-np.pi, np.pi),
                  'continuous': (-np.pi, np.pi),
                  'prismatic': (-1.0, 1.0)}


class Limits(object):
    def __init__(self, lower=0.0, upper=0.0, effort=0.0, velocity=0.0):
        """
        Joint limits, carried as data and never enforced.

        Parameters
        ------------
        lower : float
          Lower position limit in radians or meters
        upper : float
          Upper position limit in radians or meters
        effort : float
          Maximum effort
        velocity : float
          Maximum velocity
        """
        self.lower = float(lower)
        self.upper = float(upper)
        self.effort = float(effort)
        self.velocity = float(velocity)

    def __repr__(self):
        return f'<Limits [{self.lower}, {self.upper}]>'


class Joint(object):
    def __init__(self,
                 name,
                 kind,
                 connects,
                 origin=None,
                 axis=None,
                 limits=None):
        """
        Create a joint between two links.

        Parameters
        -------------
        name : str
          The name of this joint.
        kind : str
          One of `JOINT_KINDS`
        connects : (2,) str
          Names of the parent and child `Link`
        origin : None or (4, 4) float
          Parent-to-joint transform at zero state, identity if None
        axis : None or (3,) float
          Motion axis in the joint frame, (1, 0, 0) if None
        limits : None or Limits
          Declared limits
        """
        kind = str(kind).strip().lower()
        if kind not in JOINT_KINDS:
            raise ValueError(f'unknown joint type `{kind}`')
        self.name = name
        self.kind = kind

        # which links is this a joint between?
        self.connects = connects

        if origin is None:
            self.origin = np.eye(4)
        else:
            self.origin = np.array(origin, dtype=np.float64)
            if self.origin.shape != (4, 4):
                raise ValueError('origin must be (4, 4) float!')

        if axis is None:
            axis = [1.0, 0.0, 0.0]
        axis = np.array(axis, dtype=np.float64).reshape(3)
        norm = np.linalg.norm(axis)
        if norm < 1e-12:
            if self.movable:
                raise ValueError(f'joint `{name}` has a zero axis!')
        else:
            # save axis as a unit vector
            axis /= norm
        self.axis = axis

        self.limits = limits

    @property
    def connects(self):
        """
        The name of the two links this joint is connecting.

        Returns
        -------------
        connects : (2,) tuple
          Names of the parent and child `Link` objects
        """
        return self._connects

    @connects.setter
    def connects(self, values):
        if values is None or len(values) != 2:
            raise ValueError('`connects` must be two link names!')
        self._connects = tuple(values)

    @property
    def parent(self):
        return self._connects[0]

    @property
    def child(self):
        return self._connects[1]

    @property
    def movable(self):
        """
        Does this joint's state change its transform.
        """
        return self.kind in MOVABLE_KINDS

    @property
    def bounds(self):
        """
        The range a sweep or slider should cover.

        Returns
        ----------
        bounds : (2,) float
          Declared limits if there are any, otherwise
          a default range for the joint type
        """
        if self.limits is not None and self.kind != 'continuous':
            return (self.limits.lower, self.limits.upper)
        return DEFAULT_BOUNDS.get(self.kind, (0.0, 0.0))

    def motion(self, value):
        """
        The transform produced by moving this joint.

        Parameters
        ------------
        value : float
          Angle in radians or displacement in meters

        Returns
        ------------
        matrix : (4, 4) float
          Joint-frame to child-frame transform
        """
        kind = self.kind
        if kind == 'revolute' or kind == 'continuous':
            return trimesh.transformations.rotation_matrix(
                angle=float(value), direction=self.axis)
        elif kind == 'prismatic':
            return trimesh.transformations.translation_matrix(
                self.axis * float(value))
        elif kind in ('fixed', 'planar', 'floating'):
            # planar and floating motion is not modeled
            return np.eye(4)
        raise ValueError(f'unknown joint type `{kind}`')

    def transform(self, value=0.0):
        """
        Parent-to-child transform at a joint state.

        Parameters
        ------------
        value : float
          Joint state

        Returns
        ------------
        matrix : (4, 4) float
          `origin @ motion(value)`
        """
        return np.dot(self.origin, self.motion(value))

    @property
    def parameter(self):
        """
        The symbol that represents this joint's state.

        Returns
        ----------
        parameter : sympy.Symbol or None
          None for joints that do not move
        """
        if not self.movable:
            return None
        if not hasattr(self, '_parameter'):
            self._parameter = sp.Symbol(self.name)
        return self._parameter

    @property
    def matrix(self):
        """
        The symbolic parent-to-child transform.

        Returns
        -----------
        matrix : (4, 4) sympy.Matrix
          Transform with `self.parameter` as a variable
        """
        motion = sp.eye(4)
        q = self.parameter
        if self.kind == 'prismatic':
            # self.axis is a unit vector
            motion[:3, 3] = sp.Matrix(self.axis) * q
        elif q is not None:
            # Rodrigues' rotation about the unit axis
            x, y, z = [sp.Float(i) for i in self.axis]
            cross = sp.Matrix([[0, -z, y],
                               [z, 0, -x],
                               [-y, x, 0]])
            outer = sp.Matrix([x, y, z]) * sp.Matrix([[x, y, z]])
            motion[:3, :3] = (sp.cos(q) * sp.eye(3) +
                              sp.sin(q) * cross +
                              (1 - sp.cos(q)) * outer)
        return sp.Matrix(self.origin) * motion

    def __repr__(self):
        return (f'<Joint {self.name} {self.kind} '
                f'{self.parent} -> {self.child}>')
