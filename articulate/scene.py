"""
scene.py
----------

Push resolved geometry and link poses into a renderer.

A renderer is anything with two methods:

```
register(link_name, geometry_id, geometry, matrix)
update_transform(link_name, geometry_id, matrix)
```

where `matrix` is the geometry-to-world transform. `TrimeshRenderer`
implements them on a `trimesh.Scene`.
"""
import logging

import trimesh
import numpy as np

log = logging.getLogger(__name__)


class TrimeshRenderer(object):
    def __init__(self, scene=None):
        """
        Draw into a trimesh scene.

        Parameters
        ------------
        scene : None or trimesh.Scene
          Scene to add geometry to, a new one if None
        """
        if scene is None:
            scene = trimesh.Scene()
        self.scene = scene
        self.base_frame = scene.graph.base_frame

    def register(self, link_name, geometry_id, geometry, matrix):
        self.scene.add_geometry(
            geometry,
            node_name=geometry_id,
            geom_name=geometry_id,
            transform=matrix)

    def update_transform(self, link_name, geometry_id, matrix):
        self.scene.graph.update(
            frame_from=self.base_frame,
            frame_to=geometry_id,
            matrix=matrix)


class SceneBinder(object):
    """
    Map link geometry onto renderables and keep their
    transforms in step with a `ForwardKinematics` engine.
    """

    def __init__(self, renderer, geometry):
        """
        Parameters
        ------------
        renderer : object
          Has `register` and `update_transform`
        geometry : dict
          Link name to a list of `ResolvedGeometry`
        """
        self.renderer = renderer
        self.geometry = geometry
        self.bound = False
        # last world transform sent for each link with geometry
        self._pushed = {}

    def bind(self, kinematics):
        """
        Register every piece of geometry at its current pose.

        Parameters
        ------------
        kinematics : ForwardKinematics
          Engine supplying link poses
        """
        if self.bound:
            raise ValueError('binder is already bound!')
        poses = kinematics.poses()
        count = 0
        for link in kinematics.tree.order:
            entries = self.geometry.get(link)
            if not entries:
                continue
            for geom in entries:
                self.renderer.register(
                    link_name=link,
                    geometry_id=geom.name,
                    geometry=geom.mesh,
                    matrix=np.dot(poses[link], geom.transform))
                count += 1
            self._pushed[link] = poses[link]
        self.bound = True
        log.debug('registered %d renderables', count)

    def push(self, kinematics, links=None):
        """
        Send new transforms for links that moved since this
        binder last pushed them.

        Parameters
        ------------
        kinematics : ForwardKinematics
          Engine supplying link poses
        links : None or (n,) str
          Links to update regardless of whether they moved,
          every link whose pose changed if None

        Returns
        ------------
        count : int
          Number of renderables updated
        """
        if not self.bound:
            raise ValueError('call `bind` before `push`!')
        poses = kinematics.poses()
        if links is None:
            # compare against what was sent rather than the engine's
            # dirty joints, which any pose read clears
            links = [link for link, pose in self._pushed.items()
                     if not np.array_equal(pose, poses[link])]
        count = 0
        for link in links:
            entries = self.geometry.get(link)
            if not entries:
                continue
            pose = poses[link]
            for geom in entries:
                self.renderer.update_transform(
                    link_name=link,
                    geometry_id=geom.name,
                    matrix=np.dot(pose, geom.transform))
                count += 1
            self._pushed[link] = pose
        return count
