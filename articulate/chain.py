"""
chain.py
----------

Build a validated kinematic tree out of an unordered list of
links and joints.

Links and joints are stored in dense arrays ordered so every
parent comes before its children, with parent relationships
held as integer indices.
"""
import logging
import collections

import sympy as sp
import numpy as np
import networkx as nx

from .exceptions import (TreeBuildError,
                         NoRootFound,
                         MultipleRoots,
                         CycleDetected,
                         DanglingJointReference,
                         DuplicateParent)

log = logging.getLogger(__name__)


class KinematicTree(object):
    """
    Links (nodes) connected by joints (edges) with a single root.

    Built once by `build_tree` and never modified afterwards.
    """

    def __init__(self, links, joints, parents):
        """
        Use `build_tree` rather than calling this directly.

        Parameters
        --------------
        links : (n,) Link
          Links with the root first and parents before children
        joints : (n - 1,) Joint
          `joints[i]` is the parent joint of `links[i + 1]`
        parents : (n,) int
          Index of each link's parent link, -1 for the root
        """
        self.links = tuple(links)
        self.joints = tuple(joints)
        self.parents = np.array(parents, dtype=np.int64)
        self.parents.flags.writeable = False

        self.link_index = {L.name: i for i, L in enumerate(self.links)}
        self.joint_index = {j.name: i for i, j in enumerate(self.joints)}

        depth = np.zeros(len(self.links), dtype=np.int64)
        children = [[] for _ in self.links]
        for i in range(1, len(self.links)):
            depth[i] = depth[self.parents[i]] + 1
            children[self.parents[i]].append(i - 1)
        depth.flags.writeable = False
        self.depth = depth
        # joint indices leaving each link, in traversal order
        self.children = tuple(tuple(c) for c in children)

    @property
    def root(self):
        """
        Name of the root link.
        """
        return self.links[0].name

    @property
    def order(self):
        """
        Link names with every parent before its children.
        """
        return tuple(L.name for L in self.links)

    @property
    def parameters(self):
        """
        What are the variables that define the state of the tree.

        Returns
        ---------
        parameters : (n,) sympy.Symbol
          One symbol per movable joint in traversal order
        """
        return [j.parameter for j in self.joints if j.movable]

    @property
    def movable(self):
        """
        Names of joints whose state moves their child link.
        """
        return [j.name for j in self.joints if j.movable]

    @property
    def limits(self):
        """
        Slider bounds for every movable joint.

        Returns
        ----------
        limits : (m, 2) float
          Sorted lower and upper bound per movable joint
        """
        bounds = [j.bounds for j in self.joints if j.movable]
        if len(bounds) == 0:
            return np.zeros((0, 2))
        return np.sort(bounds, axis=1)

    def parent_joint(self, link):
        """
        The joint whose child is `link`.

        Parameters
        ------------
        link : str
          Link name

        Returns
        ------------
        joint : Joint or None
          None for the root
        """
        index = self.link_index[link]
        if index == 0:
            return None
        return self.joints[index - 1]

    def subtree(self, link):
        """
        Indices of a link and every link below it.

        Parameters
        ------------
        link : int or str
          Link index or name

        Returns
        ------------
        indices : (k,) int
          Link indices in traversal order
        """
        if not isinstance(link, (int, np.integer)):
            link = self.link_index[link]
        inside = np.zeros(len(self.links), dtype=bool)
        inside[link] = True
        # parents come first so one forward pass is enough
        for i in range(link + 1, len(self.links)):
            inside[i] = inside[self.parents[i]]
        return np.nonzero(inside)[0]

    def graph(self):
        """
        Get a directed graph where joints are edges between links.

        Returns
        ----------
        graph : networkx.DiGraph
          Graph containing connectivity information
        """
        graph = nx.DiGraph()
        graph.add_nodes_from(self.order)
        for joint in self.joints:
            graph.add_edge(*joint.connects, joint=joint.name)
        return graph

    def paths(self):
        """
        Find the route from the root to every link.

        Returns
        ---------
        joint_paths : dict
          Keys are link names, values are a list of joint names
        """
        joint_paths = {self.root: []}
        for i, joint in enumerate(self.joints):
            parent = self.links[self.parents[i + 1]].name
            joint_paths[joint.child] = joint_paths[parent] + [joint.name]
        return joint_paths

    def forward_kinematics(self, anchor=None):
        """
        Get the symbolic sympy forward kinematics.

        Parameters
        ------------
        anchor : None or (4, 4) float
          World transform of the root

        Returns
        -----------
        symbolic : dict
          Keyed by link name to a sympy matrix
        """
        if anchor is None:
            root = sp.eye(4)
        else:
            root = sp.Matrix(anchor)
        combined = [root]
        for i, joint in enumerate(self.joints):
            combined.append(combined[self.parents[i + 1]] * joint.matrix)
        return dict(zip(self.order, combined))

    def forward_kinematics_lambda(self, anchor=None):
        """
        Get a numpy-lambda for evaluating forward kinematics relatively
        quickly.

        Returns
        -----------
        lambdas : dict
          Link name to function which takes float values
          corresponding to self.parameters.
        """
        # a symbolic equation for every link
        combined = self.forward_kinematics(anchor=anchor)
        parameters = self.parameters
        return {k: sp.lambdify(parameters, c, modules='numpy',
                               dummify=True)
                for k, c in combined.items()}

    def __len__(self):
        return len(self.links)

    def __repr__(self):
        return (f'<KinematicTree root={self.root} '
                f'links={len(self.links)} joints={len(self.joints)}>')


def build_tree(links, joints):
    """
    Arrange links and joints into a tree, checking that it is one.

    Parameters
    ------------
    links : (n,) Link
      Every link, in any order
    joints : (m,) Joint
      Every joint, in any order

    Returns
    ------------
    tree : KinematicTree
      Validated tree with parents before children

    Raises
    ------------
    DanglingJointReference
      A joint names a link that does not exist
    DuplicateParent
      A link is the child of more than one joint
    NoRootFound
      Every link has a parent joint
    MultipleRoots
      More than one link has no parent joint
    CycleDetected
      Some links can not be reached from the root
    """
    links = list(links)
    joints = list(joints)

    by_name = {}
    for link in links:
        if link.name in by_name:
            raise TreeBuildError(f'duplicate link name `{link.name}`')
        by_name[link.name] = link
    if len(by_name) == 0:
        raise NoRootFound()

    names = set()
    # the joint whose child is a link
    incoming = {}
    # joints leaving a link in declaration order
    outgoing = collections.defaultdict(list)
    for joint in joints:
        if joint.name in names:
            raise TreeBuildError(f'duplicate joint name `{joint.name}`')
        names.add(joint.name)
        for name in joint.connects:
            if name not in by_name:
                raise DanglingJointReference(joint=joint.name, link=name)
        if joint.child in incoming:
            raise DuplicateParent(
                link=joint.child,
                joints=[incoming[joint.child].name, joint.name])
        incoming[joint.child] = joint
        outgoing[joint.parent].append(joint)

    roots = [name for name in by_name if name not in incoming]
    if len(roots) == 0:
        raise NoRootFound(cycle=_find_cycle(joints))
    elif len(roots) > 1:
        raise MultipleRoots(roots)

    # breadth first from the root
    order = [by_name[roots[0]]]
    ordered_joints = []
    parents = [-1]
    index = {roots[0]: 0}
    queue = collections.deque([roots[0]])
    while queue:
        current = queue.popleft()
        for joint in outgoing[current]:
            # each child has one incoming joint so it is new here
            index[joint.child] = len(order)
            order.append(by_name[joint.child])
            ordered_joints.append(joint)
            parents.append(index[current])
            queue.append(joint.child)

    if len(order) != len(by_name):
        unreached = [j for j in joints if j.child not in index]
        raise CycleDetected(_find_cycle(unreached))

    tree = KinematicTree(links=order,
                         joints=ordered_joints,
                         parents=parents)
    log.debug('built tree rooted at `%s`: %d links, max depth %d',
              tree.root, len(tree.links), int(tree.depth.max()))
    return tree


def _find_cycle(joints):
    """
    Name the links on a cycle formed by some joints.

    Parameters
    ------------
    joints : (n,) Joint
      Joints that contain a cycle

    Returns
    ------------
    cycle : (k,) str
      Link names with the first repeated at the end
    """
    graph = nx.DiGraph()
    graph.add_edges_from(j.connects for j in joints)
    try:
        edges = nx.find_cycle(graph)
    except nx.NetworkXNoCycle:
        return []
    return [a for a, b in edges] + [edges[0][0]]
