"""
exceptions.py
---------------

Errors raised while loading and posing a robot description.

`ParseError` and `TreeBuildError` are fatal and abort a load,
`GeometryError` and `KinematicError` are collected and logged
while the rest of the model keeps working.
"""


class ArticulateError(Exception):
    """
    Base class for every error raised by this package.
    """


class ParseError(ArticulateError, ValueError):
    """
    The description text is malformed or is missing
    something the format requires.
    """


class GeometryError(ArticulateError):
    def __init__(self, message, link=None, filename=None):
        """
        Geometry attached to a link could not be produced.

        Parameters
        ------------
        message : str
          What went wrong
        link : None or str
          Name of the link the geometry belongs to
        filename : None or str
          Mesh reference that failed, if any
        """
        super().__init__(message)
        self.link = link
        self.filename = filename


class TreeBuildError(ArticulateError, ValueError):
    """
    Links and joints do not form a single rooted tree.
    """


class NoRootFound(TreeBuildError):
    def __init__(self, cycle=None):
        if cycle:
            message = ('every link has a parent joint, cycle: ' +
                       ' -> '.join(cycle))
        else:
            message = 'no root link found'
        super().__init__(message)
        self.cycle = cycle


class MultipleRoots(TreeBuildError):
    def __init__(self, roots):
        super().__init__(
            f'expected one root link, found {len(roots)}: ' +
            ', '.join(roots))
        self.roots = list(roots)


class CycleDetected(TreeBuildError):
    def __init__(self, cycle):
        super().__init__('links form a cycle: ' + ' -> '.join(cycle))
        self.cycle = list(cycle)


class DanglingJointReference(TreeBuildError):
    def __init__(self, joint, link):
        super().__init__(
            f'joint `{joint}` references missing link `{link}`')
        self.joint = joint
        self.link = link


class DuplicateParent(TreeBuildError):
    def __init__(self, link, joints):
        super().__init__(
            f'link `{link}` is the child of more than one joint: ' +
            ', '.join(joints))
        self.link = link
        self.joints = list(joints)


class KinematicError(ArticulateError, KeyError):
    def __init__(self, joint):
        """
        A joint state referenced a joint the tree does not have.

        Parameters
        ------------
        joint : str
          The unknown joint name
        """
        super().__init__(joint)
        self.joint = joint

    def __str__(self):
        return f'unknown joint `{self.joint}`'
