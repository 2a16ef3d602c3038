# -- Boundary Coupling Protocols -- #

'''
Configuration dataclass and collaborator protocols for the boundary model.

Defines BoundaryConfig (sampling resolution, kernel choice, reference
density, strong-coupling switch) and the structural protocols the
boundary model expects from its external collaborators: the rigid body
it samples and the binary stream used for persistence.

Sean Bowman [02/05/2026]
'''

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Protocol

import numpy as np

from boundaryCoupling import constants as const


######################################################################
# -- Boundary Configuration -- #
######################################################################

@dataclass
class BoundaryConfig:
    '''
    Configuration for an Akinci 2012 boundary model.

    Parameters:
    -----------
    particleRadius : float
        Boundary particle radius [m]; sampling spacing is twice this
    smoothingLengthRatio : float
        Ratio h / particleSpacing
    referenceDensity : float
        Reference density rho_0 used to interpret volumes [kg/m^3]
    kernelType : str
        Kernel type: 'cubicSpline' or 'wendlandC2'
    dimensions : int
        Number of spatial dimensions used for kernel normalization
    strongCoupling : bool
        Allocate the Gissler 2019 strong-coupling fields
    zSort : bool
        Whether the neighbor search should reorder particles spatially
    '''

    particleRadius: float = const.defaultParticleRadius
    smoothingLengthRatio: float = const.defaultSmoothingLengthRatio
    referenceDensity: float = const.referenceDensity
    kernelType: str = const.defaultKernelType
    dimensions: int = 3
    strongCoupling: bool = False
    zSort: bool = True

    def __post_init__(self) -> None:
        if self.particleRadius <= 0.0:
            raise ValueError(f'particleRadius must be positive, got {self.particleRadius}')
        if self.smoothingLengthRatio <= 0.0:
            raise ValueError(
                f'smoothingLengthRatio must be positive, got {self.smoothingLengthRatio}'
            )
        if self.dimensions not in (2, 3):
            raise ValueError(f'dimensions must be 2 or 3, got {self.dimensions}')

    @property
    def particleSpacing(self) -> float:
        '''Sampling distance between boundary particles [m].'''
        return 2.0 * self.particleRadius

    @property
    def smoothingLength(self) -> float:
        '''Smoothing length h = ratio * spacing [m].'''
        return self.smoothingLengthRatio * self.particleSpacing

    @property
    def supportRadius(self) -> float:
        '''
        Kernel support radius [m].

        Both provided kernels vanish beyond 2h, so this is also
        the neighbor search radius.
        '''
        return 2.0 * self.smoothingLength

    @classmethod
    def fromJson(cls, configPath: str) -> BoundaryConfig:
        '''
        Load configuration from a JSON file.

        Reads the 'boundary', 'sph', and 'fluid' sections; missing
        keys fall back to the package defaults.

        Parameters:
        -----------
        configPath : str
            Path to the JSON configuration file

        Returns:
        --------
        BoundaryConfig : Loaded configuration
        '''
        with open(configPath, 'r') as f:
            data = json.load(f)

        boundarySection = data.get('boundary', {})
        sphSection = data.get('sph', {})
        fluidSection = data.get('fluid', {})

        return cls(
            particleRadius=sphSection.get('particleRadius', const.defaultParticleRadius),
            smoothingLengthRatio=sphSection.get(
                'smoothingLengthRatio', const.defaultSmoothingLengthRatio
            ),
            referenceDensity=fluidSection.get('density', const.referenceDensity),
            kernelType=sphSection.get('kernelType', const.defaultKernelType),
            dimensions=sphSection.get('dimensions', 3),
            strongCoupling=boundarySection.get('strongCoupling', False),
            zSort=sphSection.get('zSort', True),
        )


######################################################################
# -- Rigid Body Protocol -- #
######################################################################

class RigidBodyObject(Protocol):
    '''
    Protocol for the rigid body a boundary model is sampled from.

    The boundary model only reads the pose and velocity; force and
    torque are handed back through addForce / addTorque.
    '''

    def getPosition(self) -> np.ndarray:
        '''Center of mass / origin of the body frame [m], shape (3,).'''
        ...

    def getRotation(self) -> np.ndarray:
        '''Rotation matrix of the body frame, shape (3, 3).'''
        ...

    def getVelocity(self) -> np.ndarray:
        '''Linear velocity [m/s], shape (3,).'''
        ...

    def getAngularVelocity(self) -> np.ndarray:
        '''Angular velocity [rad/s], shape (3,).'''
        ...

    def isDynamic(self) -> bool:
        '''True if the body is integrated by a rigid-body solver.'''
        ...

    def isAnimated(self) -> bool:
        '''True if the body follows a prescribed (kinematic) motion.'''
        ...

    def addForce(self, force: np.ndarray) -> None:
        '''Accumulate an external force [N].'''
        ...

    def addTorque(self, torque: np.ndarray) -> None:
        '''Accumulate an external torque [N*m].'''
        ...


######################################################################
# -- Binary Stream Protocols -- #
######################################################################

class BinaryWriter(Protocol):
    '''Sequential writer for scalars and contiguous numeric buffers.'''

    def write(self, value: float | int | bool, dtype: np.dtype | type) -> None:
        ...

    def writeBuffer(self, array: np.ndarray) -> None:
        ...


class BinaryReader(Protocol):
    '''Sequential reader matching BinaryWriter.'''

    def read(self, dtype: np.dtype | type) -> float | int | bool:
        ...

    def readBuffer(self, dtype: np.dtype | type, shape: tuple[int, ...]) -> np.ndarray:
        ...
