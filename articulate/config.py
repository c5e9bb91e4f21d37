"""
config.py
-----------

Options controlling how a robot description is loaded.
"""
import os

from dataclasses import dataclass, field

import numpy as np
import trimesh


@dataclass
class LoadConfig:
    """
    Settings for `articulate.exchange.load_urdf`.
    """

    # package name to directory, used for `package://` mesh URIs
    package_paths: dict = field(default_factory=dict)
    # resolve relative mesh paths here instead of next to the description
    asset_root: str = None
    # (4, 4) transform placed under the root link, None is identity
    world_anchor: np.ndarray = None

    # primitive tessellation density
    sphere_subdivisions: int = 3
    cylinder_sections: int = 32

    # RGBA for visuals without a material colour
    default_color: tuple = (0.8, 0.8, 0.8, 1.0)

    def __post_init__(self):
        if self.world_anchor is not None:
            self.world_anchor = np.array(
                self.world_anchor, dtype=np.float64)
            if self.world_anchor.shape != (4, 4):
                raise ValueError('world_anchor must be (4, 4) float!')
        if self.sphere_subdivisions < 0:
            raise ValueError('sphere_subdivisions must be >= 0')
        if self.cylinder_sections < 3:
            raise ValueError('cylinder_sections must be >= 3')
        if len(self.default_color) != 4:
            raise ValueError('default_color must be RGBA')

    @property
    def anchor(self):
        """
        The root link's world transform.

        Returns
        ----------
        anchor : (4, 4) float
          Homogeneous transform
        """
        if self.world_anchor is None:
            return np.eye(4)
        return self.world_anchor.copy()

    @classmethod
    def from_environment(cls, variable='ROS_PACKAGE_PATH', **kwargs):
        """
        Collect `package://` roots from a path-list environment
        variable: every subdirectory of every listed directory
        becomes a package, and so does the listed directory itself.

        Parameters
        ------------
        variable : str
          Name of the environment variable
        kwargs : dict
          Passed to the constructor

        Returns
        ----------
        config : LoadConfig
          With `package_paths` populated
        """
        packages = {}
        for root in os.environ.get(variable, '').split(os.pathsep):
            if len(root) == 0 or not os.path.isdir(root):
                continue
            root = os.path.abspath(root)
            # earlier entries win, like the ROS lookup
            packages.setdefault(os.path.basename(root), root)
            for name in sorted(os.listdir(root)):
                path = os.path.join(root, name)
                if os.path.isdir(path):
                    packages.setdefault(name, path)
        packages.update(kwargs.pop('package_paths', {}))
        return cls(package_paths=packages, **kwargs)

    @classmethod
    def y_up(cls, **kwargs):
        """
        Anchor a Z-up robot in a Y-up world by rotating
        the root -pi/2 about X.
        """
        anchor = trimesh.transformations.rotation_matrix(
            angle=-np.pi / 2, direction=[1, 0, 0])
        return cls(world_anchor=anchor, **kwargs)
