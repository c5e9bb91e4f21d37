import sys
import logging

import trimesh
import articulate

import numpy as np


def show_bounce(robot, step=0.01, **kwargs):
    """
    A basic demonstration which will visualize a robot with every
    movable joint bouncing between its bounds.

    Parameters
    -----------
    robot : articulate.RobotModel
      Loaded robot
    step : float
      Joint motion per frame in radians or meters
    kwargs : dict
      Passed to scene.show
    """
    def callback(scene):
        # move every joint and push the links that moved
        kinematics.update(dict(zip(names, position)))
        binder.push(kinematics)

        # reverse the motion direction when we hit a joint limit
        reverse = ((position <= limits[:, 0]) |
                   (position >= limits[:, 1]))
        direction[reverse] *= -1
        position[:] = np.clip(position + step * direction,
                              limits[:, 0], limits[:, 1])

    renderer = articulate.TrimeshRenderer()
    binder, kinematics = robot.bind(renderer)

    names = robot.tree.movable
    limits = robot.tree.limits
    # start in the middle of every range
    position = limits.mean(axis=1)
    direction = np.ones(len(names))

    # show the robot moving with a callback
    renderer.scene.show(callback=callback, **kwargs)


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    trimesh.util.attach_to_log(level=logging.WARNING)

    if len(sys.argv) < 2:
        sys.exit('usage: python example.py robot.urdf')

    config = articulate.LoadConfig.from_environment()
    robot = articulate.load_urdf(sys.argv[1], config=config)
    for error in robot.errors:
        print('skipped:', error)

    show_bounce(robot)
