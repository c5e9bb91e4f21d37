"""
exchange.py
--------------

Load robot descriptions in the URDF format.
"""
import os
import logging
import collections

import trimesh

import numpy as np

from lxml import etree
from trimesh.resolvers import FilePathResolver, ZipResolver

from .link import Link, Visual, Shape, Material, SHAPE_KINDS
from .joint import Joint, Limits, JOINT_KINDS
from .chain import build_tree
from .robot import RobotModel
from .config import LoadConfig
from .geometry import resolve_link
from .exceptions import ParseError

log = logging.getLogger(__name__)

# the parsed but unvalidated contents of a description
Description = collections.namedtuple(
    'Description', ['name', 'links', 'joints', 'materials'])


def _tag(element):
    """
    Local tag name of an element without any namespace,
    or None for comments and processing instructions.
    """
    if not isinstance(element.tag, str):
        return None
    return etree.QName(element).localname


def _children(element, name):
    return [c for c in element if _tag(c) == name]


def _child(element, name):
    for child in element:
        if _tag(child) == name:
            return child
    return None


def _attrib(element, key, where):
    """
    Get an attribute the format requires.
    """
    value = element.get(key)
    if value is None:
        raise ParseError(f'{where}: `<{_tag(element)}>` is missing `{key}`')
    return value


def _floats(text, count, where):
    """
    Parse a whitespace separated list of floats.

    Parameters
    ------------
    text : str
      Such as '0 0.5 1'
    count : int or tuple
      Allowed number of values
    where : str
      Context for error messages

    Returns
    ------------
    values : (count,) float
      Parsed values
    """
    if isinstance(count, int):
        count = (count,)
    try:
        values = np.array(text.split(), dtype=np.float64)
    except ValueError as E:
        raise ParseError(f'{where}: `{text}` is not numeric') from E
    if len(values) not in count or not np.isfinite(values).all():
        expected = ' or '.join(str(c) for c in count)
        raise ParseError(f'{where}: expected {expected} values, got `{text}`')
    return values


def parse_origin(node, where=''):
    """
    Find the `origin` subelement of an XML node and convert it
    into a homogeneous transformation matrix.

    Parameters
    ----------
    node : lxml.etree.Element
      An XML node which optionally has an `origin` child node
    where : str
      Context for error messages

    Returns
    -------
    matrix : (4, 4) float
      Transform matrix that corresponds to node origin child
      or identity matrix if no origin.
    """
    matrix = np.eye(4, dtype=np.float64)
    origin = _child(node, 'origin')
    if origin is None:
        return matrix
    if 'rpy' in origin.attrib:
        rpy = _floats(origin.attrib['rpy'], 3, where + ' origin rpy')
        # roll, pitch, yaw about the fixed X, Y, Z axes
        matrix = trimesh.transformations.euler_matrix(*rpy, axes='sxyz')
    if 'xyz' in origin.attrib:
        matrix[:3, 3] = _floats(origin.attrib['xyz'], 3, where + ' origin xyz')
    return matrix


def parse_color(node, where):
    color = _child(node, 'color')
    if color is None:
        return None
    rgba = _floats(_attrib(color, 'rgba', where), 4, where + ' rgba')
    return np.clip(rgba, 0.0, 1.0)


def parse_material(node, where):
    texture = _child(node, 'texture')
    if texture is not None:
        texture = texture.get('filename')
    return Material(name=node.get('name', ''),
                    color=parse_color(node, where),
                    texture=texture)


def parse_shape(geometry, where):
    """
    Read the single shape inside a `<geometry>` element.
    """
    shapes = [c for c in geometry if _tag(c) is not None]
    if len(shapes) == 0:
        raise ParseError(f'{where}: `<geometry>` has no shape')
    node = shapes[0]
    kind = _tag(node)
    if kind not in SHAPE_KINDS:
        raise ParseError(f'{where}: unknown shape kind `{kind}`')
    where = f'{where} {kind}'
    if kind == 'mesh':
        scale = node.get('scale')
        if scale is not None:
            scale = _floats(scale, (1, 3), where + ' scale')
            scale = np.ones(3) * scale
        return Shape(kind,
                     filename=_attrib(node, 'filename', where),
                     scale=scale)
    elif kind == 'box':
        return Shape(kind, size=_floats(
            _attrib(node, 'size', where), 3, where))
    elif kind == 'cylinder':
        return Shape(
            kind,
            radius=_floats(_attrib(node, 'radius', where), 1, where)[0],
            length=_floats(_attrib(node, 'length', where), 1, where)[0])
    return Shape(
        kind, radius=_floats(_attrib(node, 'radius', where), 1, where)[0])


def parse_link(node, materials):
    """
    Parse a `<link>` element, collision geometry is ignored.

    Parameters
    ------------
    node : lxml.etree.Element
      The link element
    materials : dict
      Material name to `Material`, inline materials are added

    Returns
    ------------
    link : Link
      Link with visuals in document order
    """
    name = _attrib(node, 'name', 'link')
    where = f'link `{name}`'
    visuals = []
    for index, visual in enumerate(_children(node, 'visual')):
        geometry = _child(visual, 'geometry')
        if geometry is None:
            raise ParseError(f'{where}: `<visual>` has no `<geometry>`')
        material = _child(visual, 'material')
        key = None
        if material is not None:
            parsed = parse_material(material, where)
            key = parsed.name or None
            if parsed.color is not None or parsed.texture is not None:
                if key is None:
                    key = f'{name}:{index}'
                # an inline definition does not replace a global one
                materials.setdefault(key, parsed)
        visuals.append(Visual(shape=parse_shape(geometry, where),
                              origin=parse_origin(visual, where),
                              name=visual.get('name'),
                              material=key))
    return Link(name=name, visuals=visuals)


def parse_joint(node):
    """
    Parse a `<joint>` element.

    Parameters
    ------------
    node : lxml.etree.Element
      The joint element

    Returns
    ------------
    joint : Joint
      Joint with origin, axis and limits
    """
    name = _attrib(node, 'name', 'joint')
    where = f'joint `{name}`'
    kind = _attrib(node, 'type', where).strip().lower()
    if kind not in JOINT_KINDS:
        raise ParseError(f'{where}: unknown joint type `{kind}`')

    connects = []
    for side in ('parent', 'child'):
        element = _child(node, side)
        if element is None:
            raise ParseError(f'{where}: missing `<{side}>`')
        connects.append(_attrib(element, 'link', where))

    axis = _child(node, 'axis')
    if axis is not None:
        axis = _floats(axis.get('xyz', '1 0 0'), 3, where + ' axis')

    limits = _child(node, 'limit')
    if limits is not None:
        values = {}
        for key in ('lower', 'upper', 'effort', 'velocity'):
            values[key] = _floats(
                limits.get(key, '0'), 1, f'{where} limit {key}')[0]
        limits = Limits(**values)

    try:
        return Joint(name=name,
                     kind=kind,
                     connects=connects,
                     origin=parse_origin(node, where),
                     axis=axis,
                     limits=limits)
    except ValueError as E:
        raise ParseError(f'{where}: {E}') from E


def parse_urdf(data):
    """
    Parse URDF text into unordered links and joints.

    Nothing is loaded from disk and the links and joints are
    not checked for forming a tree.

    Parameters
    ------------
    data : str or bytes
      URDF document

    Returns
    ------------
    description : Description
      Robot name, links, joints and materials

    Raises
    ------------
    ParseError
      Malformed XML, a missing required attribute, an
      unknown shape or joint type, or a duplicate name
    """
    if isinstance(data, str):
        data = data.encode('utf-8')
    try:
        root = etree.fromstring(
            data, parser=etree.XMLParser(remove_comments=True))
    except etree.XMLSyntaxError as E:
        raise ParseError(f'malformed XML: {E}') from E
    if _tag(root) != 'robot':
        raise ParseError(f'root element is `<{_tag(root)}>`, not `<robot>`')

    materials = {}
    for node in _children(root, 'material'):
        material = parse_material(node, 'material')
        if len(material.name) == 0:
            raise ParseError('robot level `<material>` needs a `name`')
        materials[material.name] = material

    links = []
    seen = set()
    for node in _children(root, 'link'):
        link = parse_link(node, materials)
        if link.name in seen:
            raise ParseError(f'duplicate link name `{link.name}`')
        seen.add(link.name)
        links.append(link)

    joints = []
    seen = set()
    for node in _children(root, 'joint'):
        joint = parse_joint(node)
        if joint.name in seen:
            raise ParseError(f'duplicate joint name `{joint.name}`')
        seen.add(joint.name)
        joints.append(joint)

    return Description(name=root.get('name', ''),
                       links=links,
                       joints=joints,
                       materials=materials)


def _parse_file(file_obj, ext='.urdf'):
    """
    Read a description from a file path or ZIP archive.

    Parameters
    ----------
    file_obj : str
      Path to a description file or ZIP archive
    ext : str
      Extension of the description inside an archive

    Returns
    -----------
    data : bytes
      Description text
    resolver : trimesh.resolvers.Resolver
      Loads files next to the description
    """
    path = os.fspath(file_obj)
    if path.lower().endswith('.zip'):
        # load the ZIP archive
        with open(path, 'rb') as f:
            archive = trimesh.util.decompress(f, 'zip')
        # the first description in the archive
        keys = sorted(k for k in archive.keys()
                      if k.lower().endswith(ext))
        if len(keys) == 0:
            raise ParseError(f'no {ext} file inside `{path}`')
        data = archive[keys[0]].read()
        # mesh paths are relative to the description inside the archive
        prefix = os.path.dirname(keys[0])
        archive = {os.path.relpath(k, prefix) if prefix else k: v
                   for k, v in archive.items()}
        resolver = ZipResolver(archive)
    else:
        with open(path, 'rb') as f:
            data = f.read()
        # package and asset directories usually sit outside the
        # directory of the description
        resolver = FilePathResolver(path, allow_anywhere=True)
    return data, resolver


def load_urdf(file_obj, resolver=None, config=None):
    """
    Load a URDF robot from a file path, ZIP archive or text.

    Geometry that can not be loaded is skipped with a warning
    and recorded in `RobotModel.errors`.

    Parameters
    ------------
    file_obj : str, bytes or path
      Path to a URDF file, a ZIP holding one, or URDF text
    resolver : None or trimesh.resolvers.Resolver
      Source of mesh bytes, by default files next to the
      description or under `config.asset_root`
    config : None or LoadConfig
      Load settings

    Returns
    ------------
    robot : RobotModel
      Loaded robot at the zero pose

    Raises
    ------------
    ParseError
      The description is malformed
    TreeBuildError
      Links and joints do not form a single tree
    """
    if config is None:
        config = LoadConfig()

    if isinstance(file_obj, bytes) or (
            isinstance(file_obj, str) and file_obj.lstrip().startswith('<')):
        data = file_obj
    else:
        data, found = _parse_file(file_obj)
        if resolver is None:
            resolver = found
    if resolver is None and config.asset_root is not None:
        resolver = FilePathResolver(config.asset_root, allow_anywhere=True)

    description = parse_urdf(data)
    tree = build_tree(links=description.links, joints=description.joints)

    errors = []
    geometry = {}
    for link in tree.links:
        geometry[link.name] = resolve_link(link,
                                           resolver=resolver,
                                           config=config,
                                           materials=description.materials,
                                           errors=errors)
    if len(errors) > 0:
        log.warning('robot `%s` loaded with %d geometry errors',
                    description.name, len(errors))

    return RobotModel(name=description.name,
                      tree=tree,
                      geometry=geometry,
                      materials=description.materials,
                      errors=errors,
                      anchor=config.world_anchor)
