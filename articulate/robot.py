"""
robot.py
----------

A loaded robot: the kinematic tree plus the geometry
that resolved for each link.
"""
import numpy as np

from .kinematics import ForwardKinematics
from .scene import SceneBinder, TrimeshRenderer


class RobotModel(object):
    def __init__(self,
                 name,
                 tree,
                 geometry,
                 materials=None,
                 errors=None,
                 anchor=None):
        """
        Create a robot model.

        Parameters
        --------------
        name : str
          Robot name from the description
        tree : KinematicTree
          Validated link and joint structure
        geometry : dict
          Link name to list of `ResolvedGeometry`
        materials : None or dict
          Material name to `Material`
        errors : None or list
          Non-fatal errors hit while loading
        anchor : None or (4, 4) float
          World transform of the root link
        """
        self.name = name
        self.tree = tree
        self.geometry = geometry
        if materials is None:
            materials = {}
        self.materials = materials
        if errors is None:
            errors = []
        self.errors = errors
        if anchor is None:
            anchor = np.eye(4)
        self.anchor = np.array(anchor, dtype=np.float64)

    @property
    def geometry_less(self):
        """
        Links that declared geometry but ended up with none.

        Returns
        ----------
        links : (n,) str
          Link names in tree order
        """
        return [link.name for link in self.tree.links
                if len(link.visuals) > 0 and
                len(self.geometry.get(link.name, [])) == 0]

    def kinematics(self):
        """
        Get a forward kinematics engine at the zero pose.

        Returns
        ----------
        kinematics : ForwardKinematics
          Engine with its own joint state
        """
        return ForwardKinematics(self.tree, anchor=self.anchor)

    def bind(self, renderer, kinematics=None):
        """
        Register this robot's geometry with a renderer.

        Parameters
        ------------
        renderer : object
          Has `register` and `update_transform`
        kinematics : None or ForwardKinematics
          Engine to take poses from, a new one if None

        Returns
        ------------
        binder : SceneBinder
          Bound binder, call `push` after changing joint state
        kinematics : ForwardKinematics
          The engine the binder was bound with
        """
        if kinematics is None:
            kinematics = self.kinematics()
        binder = SceneBinder(renderer=renderer, geometry=self.geometry)
        binder.bind(kinematics)
        return binder, kinematics

    def scene(self):
        """
        Get a scene containing the geometry for every link
        at the zero pose.

        Returns
        -----------
        scene : trimesh.Scene
          Scene with link geometry
        """
        renderer = TrimeshRenderer()
        self.bind(renderer)
        return renderer.scene

    def show(self, **kwargs):
        """
        Open a pyglet window showing all geometry.
        """
        self.scene().show(**kwargs)

    def __repr__(self):
        return (f'<RobotModel {self.name} links={len(self.tree.links)} '
                f'errors={len(self.errors)}>')
