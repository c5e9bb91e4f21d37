"""
geometry.py
-------------

Turn the shape descriptors on each link into trimesh geometry.

Mesh files are fetched through a trimesh resolver, which is the
only place bytes are read, so a model can be loaded from a
directory, a ZIP archive or anything else with a `get(name)`.
"""
import os
import logging

import trimesh
import numpy as np

from .config import LoadConfig
from .exceptions import GeometryError

log = logging.getLogger(__name__)


class ResolvedGeometry(object):
    def __init__(self, name, link, mesh, transform):
        """
        Geometry ready to hand to a renderer.

        Parameters
        ------------
        name : str
          Identifier, unique within a model
        link : str
          Name of the link carrying this geometry
        mesh : trimesh.Trimesh
          Vertices in the geometry frame with scale applied
        transform : (4, 4) float
          Link-to-geometry transform, kept separate from the
          vertices so it can be composed with the link pose
        """
        self.name = name
        self.link = link
        self.mesh = mesh
        self.transform = np.array(transform, dtype=np.float64)

    def __repr__(self):
        return f'<ResolvedGeometry {self.name} faces={len(self.mesh.faces)}>'


def candidates(filename, config=None):
    """
    Names a mesh reference might be found under, best first.

    Parameters
    ------------
    filename : str
      Reference from the description, such as
      `package://robot/meshes/base.stl`
    config : None or LoadConfig
      Supplies `package_paths` and `asset_root`

    Returns
    ------------
    names : (n,) str
      Paths to try with a resolver, absolute or relative
      to the description
    """
    if config is None:
        config = LoadConfig()
    filename = filename.strip()
    names = []
    if filename.startswith('package://'):
        package, _, rest = filename[len('package://'):].partition('/')
        if package in config.package_paths:
            names.append(os.path.join(config.package_paths[package], rest))
        # descriptions usually sit one directory below the package
        names.extend([rest,
                      os.path.join(package, rest),
                      os.path.join('..', rest)])
    elif filename.startswith('file://'):
        names.append(filename[len('file://'):])
    else:
        names.append(filename)

    if config.asset_root is not None:
        names = [n if os.path.isabs(n) else
                 os.path.join(config.asset_root, n) for n in names]

    # remove duplicates keeping the order
    return list(dict.fromkeys(os.path.normpath(n) for n in names))


def fetch(filename, resolver, config=None):
    """
    Get the raw bytes of a mesh reference.

    Parameters
    ------------
    filename : str
      Mesh reference from the description
    resolver : trimesh.resolvers.Resolver
      Anything with a `get(name) -> bytes` method
    config : None or LoadConfig
      Path resolution settings

    Returns
    ------------
    name : str
      The candidate that was found
    data : bytes
      File contents

    Raises
    ------------
    GeometryError
      No candidate could be read
    """
    if resolver is None:
        raise GeometryError(f'no resolver to load `{filename}`',
                            filename=filename)
    tried = []
    for name in candidates(filename, config=config):
        try:
            data = resolver.get(name)
        except (OSError, KeyError, ValueError) as E:
            tried.append(f'{name} ({type(E).__name__})')
            continue
        if data is None:
            tried.append(f'{name} (empty)')
            continue
        log.debug('resolved `%s` to `%s`', filename, name)
        return name, data
    raise GeometryError(
        f'unable to read `{filename}`, tried: ' + ', '.join(tried),
        filename=filename)


def decode(data, file_type):
    """
    Decode mesh bytes into a single mesh.

    Parameters
    ------------
    data : bytes
      File contents
    file_type : str
      File name or extension, like `base.stl`

    Returns
    ------------
    mesh : trimesh.Trimesh
      Decoded mesh with at least one face
    """
    file_type = file_type.lower().split('.')[-1]
    if file_type not in trimesh.available_formats():
        raise GeometryError(f'unsupported mesh format `{file_type}`')
    try:
        mesh = trimesh.load(
            file_obj=trimesh.util.wrap_as_stream(data),
            file_type=file_type,
            force='mesh')
    except Exception as E:
        raise GeometryError(f'corrupt `{file_type}` mesh: {E}') from E
    if not isinstance(mesh, trimesh.Trimesh) or len(mesh.faces) == 0:
        raise GeometryError(f'`{file_type}` mesh contains no faces')
    return mesh


def primitive(shape, config=None):
    """
    Tessellate a box, cylinder or sphere.

    Parameters
    ------------
    shape : Shape
      Primitive descriptor
    config : None or LoadConfig
      Tessellation density

    Returns
    ------------
    mesh : trimesh.Trimesh
      Centered on the geometry frame origin
    """
    if config is None:
        config = LoadConfig()
    kind = shape.kind
    if kind == 'box':
        if shape.size is None or (shape.size <= 0).any():
            raise GeometryError(f'box has invalid size {shape.size}')
        return trimesh.creation.box(extents=shape.size)
    elif kind == 'cylinder':
        if not shape.radius or not shape.length or (
                shape.radius < 0 or shape.length < 0):
            raise GeometryError('cylinder needs a positive radius and length')
        # trimesh cylinders run along Z like the description format
        return trimesh.creation.cylinder(
            radius=shape.radius,
            height=shape.length,
            sections=config.cylinder_sections)
    elif kind == 'sphere':
        if not shape.radius or shape.radius < 0:
            raise GeometryError('sphere needs a positive radius')
        return trimesh.creation.icosphere(
            subdivisions=config.sphere_subdivisions,
            radius=shape.radius)
    raise GeometryError(f'unknown shape kind `{kind}`')


def resolve_visual(visual, link, resolver=None, config=None, color=None):
    """
    Produce the mesh for one geometry entry.

    Parameters
    ------------
    visual : Visual
      Geometry entry from the description
    link : str
      Name of the owning link
    resolver : None or trimesh.resolvers.Resolver
      Source of mesh bytes
    config : None or LoadConfig
      Load settings
    color : None or (4,) float
      RGBA to paint the faces

    Returns
    ------------
    mesh : trimesh.Trimesh
      Scaled mesh in the geometry frame
    """
    shape = visual.shape
    try:
        if shape.kind == 'mesh':
            name, data = fetch(shape.filename, resolver, config=config)
            mesh = decode(data, file_type=name)
            if not np.allclose(shape.scale, 1.0):
                scale = np.eye(4)
                scale[:3, :3] = np.diag(shape.scale)
                mesh.apply_transform(scale)
        else:
            mesh = primitive(shape, config=config)
    except GeometryError as E:
        E.link = link
        if E.filename is None:
            E.filename = shape.filename
        raise

    if color is not None:
        mesh.visual.face_colors = color
    return mesh


def resolve_link(link,
                 resolver=None,
                 config=None,
                 materials=None,
                 errors=None):
    """
    Resolve every geometry entry on a link.

    Entries that fail are skipped with a warning, and the
    error appended to `errors`.

    Parameters
    ------------
    link : Link
      Link with visuals
    resolver : None or trimesh.resolvers.Resolver
      Source of mesh bytes
    config : None or LoadConfig
      Load settings
    materials : None or dict
      Material name to `Material`
    errors : None or list
      Collects `GeometryError` for skipped entries

    Returns
    ------------
    geometry : (n,) ResolvedGeometry
      One per entry that resolved
    """
    if config is None:
        config = LoadConfig()
    if materials is None:
        materials = {}
    resolved = []
    for index, visual in enumerate(link.visuals):
        color = config.default_color
        if visual.material is not None:
            material = materials.get(visual.material)
            if material is None:
                log.warning('link `%s` uses undefined material `%s`',
                            link.name, visual.material)
            elif material.color is not None:
                color = material.color
        try:
            mesh = resolve_visual(visual,
                                  link=link.name,
                                  resolver=resolver,
                                  config=config,
                                  color=color)
        except GeometryError as E:
            log.warning('skipping geometry %d on link `%s`: %s',
                        index, link.name, E)
            if errors is not None:
                errors.append(E)
            continue
        name = f'{link.name}:{index}'
        mesh.metadata['name'] = name
        resolved.append(ResolvedGeometry(
            name=name,
            link=link.name,
            mesh=mesh,
            transform=visual.origin))
    return resolved
