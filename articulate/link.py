"""
link.py
---------

Records for links and the geometry entries attached to them.
"""
import numpy as np

# shapes a `<geometry>` element may hold
SHAPE_KINDS = ('mesh', 'box', 'cylinder', 'sphere')


class Shape(object):
    def __init__(self,
                 kind,
                 filename=None,
                 scale=None,
                 size=None,
                 radius=None,
                 length=None):
        """
        Describe the shape of one geometry entry.

        Parameters
        ------------
        kind : str
          One of `SHAPE_KINDS`
        filename : None or str
          Unresolved mesh reference, for `mesh`
        scale : None or (3,) float
          Per-axis mesh scale, for `mesh`
        size : None or (3,) float
          Full box extents, for `box`
        radius : None or float
          For `cylinder` and `sphere`
        length : None or float
          Cylinder length along its Z axis
        """
        self.kind = str(kind)
        self.filename = filename
        if scale is None:
            self.scale = np.ones(3)
        else:
            self.scale = np.array(scale, dtype=np.float64).reshape(3)
        if size is None:
            self.size = None
        else:
            self.size = np.array(size, dtype=np.float64).reshape(3)
        self.radius = radius
        self.length = length

    def __repr__(self):
        if self.kind == 'mesh':
            return f'<Shape mesh {self.filename}>'
        return f'<Shape {self.kind}>'


class Visual(object):
    def __init__(self, shape, origin=None, name=None, material=None):
        """
        A piece of geometry attached to a link.

        Parameters
        ------------
        shape : Shape
          What to draw
        origin : None or (4, 4) float
          Link-to-geometry transform, identity if None
        name : None or str
          Optional name from the description
        material : None or str
          Name of the material this visual uses
        """
        self.shape = shape
        if origin is None:
            self.origin = np.eye(4)
        else:
            self.origin = np.array(origin, dtype=np.float64)
        self.name = name
        self.material = material


class Material(object):
    def __init__(self, name, color=None, texture=None):
        """
        A named colour or texture.

        Parameters
        ------------
        name : str
          Material name, may be empty for inline materials
        color : None or (4,) float
          RGBA in [0, 1]
        texture : None or str
          Texture file reference, carried but not loaded
        """
        self.name = name
        if color is None:
            self.color = None
        else:
            self.color = np.array(color, dtype=np.float64).reshape(4)
        self.texture = texture


class Link(object):
    def __init__(self, name, visuals=None):
        """
        `Link` objects are rigid bodies that carry geometry.

        Parameters
        ------------
        name : str
          The name of the Link object
        visuals : None or (n,) Visual
          Geometry attached to this link, in document order
        """
        self.name = name
        if visuals is None:
            visuals = []
        self.visuals = list(visuals)

    def __repr__(self):
        return f'<Link {self.name} visuals={len(self.visuals)}>'
