# -- Rigid Body Object -- #

'''
Minimal rigid body satisfying the RigidBodyObject protocol.

Holds a pose (origin + rotation matrix), linear and angular velocity,
and force/torque accumulators. It does no integration; a rigid-body
solver or an animation script updates the pose, the boundary model
only reads it.

Sean Bowman [02/06/2026]
'''

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


@dataclass
class RigidBody:
    '''
    Static, animated or dynamic rigid body.

    Parameters:
    -----------
    position : np.ndarray
        Origin of the body frame (center of mass) [m], shape (3,)
    rotation : np.ndarray
        Rotation matrix body -> world, shape (3, 3)
    velocity : np.ndarray
        Linear velocity [m/s], shape (3,)
    angularVelocity : np.ndarray
        Angular velocity [rad/s], shape (3,)
    dynamic : bool
        Integrated by a rigid-body solver
    animated : bool
        Follows a prescribed motion
    '''

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    angularVelocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    dynamic: bool = False
    animated: bool = False
    force: np.ndarray = field(default_factory=lambda: np.zeros(3))
    torque: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self) -> None:
        self.position = np.asarray(self.position, dtype=float).reshape(3)
        self.rotation = np.asarray(self.rotation, dtype=float).reshape(3, 3)
        self.velocity = np.asarray(self.velocity, dtype=float).reshape(3)
        self.angularVelocity = np.asarray(self.angularVelocity, dtype=float).reshape(3)
        self.force = np.array(self.force, dtype=float).reshape(3)
        self.torque = np.array(self.torque, dtype=float).reshape(3)

    def getPosition(self) -> np.ndarray:
        return self.position

    def getRotation(self) -> np.ndarray:
        return self.rotation

    def getVelocity(self) -> np.ndarray:
        return self.velocity

    def getAngularVelocity(self) -> np.ndarray:
        return self.angularVelocity

    def isDynamic(self) -> bool:
        return self.dynamic

    def isAnimated(self) -> bool:
        return self.animated

    def addForce(self, force: np.ndarray) -> None:
        self.force += force

    def addTorque(self, torque: np.ndarray) -> None:
        self.torque += torque

    def clearForces(self) -> None:
        self.force.fill(0.0)
        self.torque.fill(0.0)

