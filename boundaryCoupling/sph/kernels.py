# -- SPH Smoothing Kernels -- #

'''
Smoothing kernels used by the boundary volume estimate.

Both kernels are radially symmetric with compact support at q = 2
(q = r / h). Each kernel is written once as a dimensionless shape
function f(q) and its derivative f'(q); the scalar and batch entry
points share those definitions:

    W(r, h)     = sigma(h) * f(r / h)
    dW/dr(r, h) = sigma(h) * f'(r / h) / h

Key properties relied on by the boundary model:
- Compact support: W = 0 for r >= 2h
- Positivity: W(0) > 0, so every particle contributes to its own sum

References:
-----------
Monaghan (1992) -- Smoothed Particle Hydrodynamics
Wendland (1995) -- Piecewise polynomial, positive definite and
    compactly supported radial functions of minimal degree

Sean Bowman [02/05/2026]
'''

from __future__ import annotations

import math
from typing import Protocol

import numpy as np


######################################################################
# -- Kernel Protocol -- #
######################################################################

class SphKernel(Protocol):
    '''Protocol for SPH smoothing kernel functions.'''

    @property
    def dimensions(self) -> int:
        '''Number of spatial dimensions (2 or 3).'''
        ...

    def supportRadius(self, h: float) -> float:
        '''Radius beyond which W vanishes [m].'''
        ...

    def evaluate(self, r: float, h: float) -> float:
        '''Evaluate W(r, h) [1/m^dim].'''
        ...

    def evaluateBatch(self, distances: np.ndarray, h: float) -> np.ndarray:
        '''Evaluate W for an array of distances.'''
        ...

    def gradient(self, rVec: np.ndarray, r: float, h: float) -> np.ndarray:
        '''Evaluate grad W for the vector rVec = r_i - r_j.'''
        ...


######################################################################
# -- Shared Radial Kernel Machinery -- #
######################################################################

class _RadialKernel:
    '''
    Common evaluation code for kernels supported on q in [0, 2).

    Subclasses provide the normalization constants and the
    vectorized shape function and its derivative.
    '''

    # sigma * h^dim, indexed by dimension
    _sigmaCoefficients: dict[int, float] = {}

    def __init__(self, dimensions: int = 3) -> None:
        if dimensions not in self._sigmaCoefficients:
            raise ValueError(
                f'{type(self).__name__} supports dimensions '
                f'{sorted(self._sigmaCoefficients)}, got {dimensions}'
            )
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        '''Number of spatial dimensions.'''
        return self._dimensions

    def supportRadius(self, h: float) -> float:
        return 2.0 * h

    def _normalization(self, h: float) -> float:
        return self._sigmaCoefficients[self._dimensions] / h ** self._dimensions

    def _shape(self, q: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def _shapeDerivative(self, q: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def evaluateBatch(self, distances: np.ndarray, h: float) -> np.ndarray:
        '''
        Evaluate W(r, h) for an array of distances.

        Parameters:
        -----------
        distances : np.ndarray
            Array of distances [m], shape (N,)
        h : float
            Smoothing length [m]

        Returns:
        --------
        np.ndarray : Kernel values, shape (N,)
        '''
        q = np.asarray(distances, dtype=float) / h
        result = np.zeros_like(q)
        active = q < 2.0
        result[active] = self._normalization(h) * self._shape(q[active])
        return result

    def evaluate(self, r: float, h: float) -> float:
        return float(self.evaluateBatch(np.array([r]), h)[0])

    def wZero(self, h: float) -> float:
        '''Kernel value at r = 0, the self contribution of a particle.'''
        return self.evaluate(0.0, h)

    def gradientMagnitudeBatch(self, distances: np.ndarray, h: float) -> np.ndarray:
        '''
        Compute dW/dr for an array of distances.

        The derivative is set to zero at r = 0 (symmetry) and
        beyond the support radius.
        '''
        q = np.asarray(distances, dtype=float) / h
        result = np.zeros_like(q)
        active = (q > 1e-12) & (q < 2.0)
        result[active] = self._normalization(h) * self._shapeDerivative(q[active]) / h
        return result

    def gradientMagnitude(self, r: float, h: float) -> float:
        return float(self.gradientMagnitudeBatch(np.array([r]), h)[0])

    def gradientBatch(
        self, drVecs: np.ndarray, distances: np.ndarray, h: float
    ) -> np.ndarray:
        '''
        Kernel gradient vectors for an array of particle pairs.

        Parameters:
        -----------
        drVecs : np.ndarray
            Displacement vectors r_i - r_j, shape (N, dim)
        distances : np.ndarray
            Distances |dr|, shape (N,)
        h : float
            Smoothing length [m]

        Returns:
        --------
        np.ndarray : Gradient vectors, shape (N, dim)
        '''
        dwdr = self.gradientMagnitudeBatch(distances, h)
        safeDistances = np.where(distances > 1e-12, distances, 1.0)
        return (dwdr / safeDistances)[:, np.newaxis] * drVecs

    def gradient(self, rVec: np.ndarray, r: float, h: float) -> np.ndarray:
        rVec = np.asarray(rVec, dtype=float)
        return self.gradientBatch(rVec[np.newaxis, :], np.array([r]), h)[0]


######################################################################
# -- Cubic Spline Kernel (M4) -- #
######################################################################

class CubicSplineKernel(_RadialKernel):
    '''
    Cubic spline (M4) smoothing kernel.

    W(q) = sigma * {
        1 - (3/2)*q^2 + (3/4)*q^3    for 0 <= q < 1
        (1/4)*(2 - q)^3               for 1 <= q < 2
        0                              for q >= 2
    }

    Normalization constants (sigma):
        2D: sigma = 10 / (7 * pi * h^2)
        3D: sigma = 1 / (pi * h^3)
    '''

    _sigmaCoefficients = {2: 10.0 / (7.0 * math.pi), 3: 1.0 / math.pi}

    def _shape(self, q: np.ndarray) -> np.ndarray:
        return np.where(
            q < 1.0,
            1.0 - 1.5 * q ** 2 + 0.75 * q ** 3,
            0.25 * (2.0 - q) ** 3,
        )

    def _shapeDerivative(self, q: np.ndarray) -> np.ndarray:
        return np.where(
            q < 1.0,
            -3.0 * q + 2.25 * q ** 2,
            -0.75 * (2.0 - q) ** 2,
        )


######################################################################
# -- Wendland C2 Kernel -- #
######################################################################

class WendlandC2Kernel(_RadialKernel):
    '''
    Wendland C2 smoothing kernel.

    W(q) = sigma * (1 - q/2)^4 * (2*q + 1)  for 0 <= q < 2

    dW/dq = -5 * sigma * q * (1 - q/2)^3

    Normalization constants (sigma):
        2D: sigma = 7 / (4 * pi * h^2)
        3D: sigma = 21 / (16 * pi * h^3)
    '''

    _sigmaCoefficients = {2: 7.0 / (4.0 * math.pi), 3: 21.0 / (16.0 * math.pi)}

    def _shape(self, q: np.ndarray) -> np.ndarray:
        return (1.0 - 0.5 * q) ** 4 * (2.0 * q + 1.0)

    def _shapeDerivative(self, q: np.ndarray) -> np.ndarray:
        return -5.0 * q * (1.0 - 0.5 * q) ** 3


######################################################################
# -- Kernel Factory -- #
######################################################################

_kernelTypes: dict[str, type[_RadialKernel]] = {
    'cubicSpline': CubicSplineKernel,
    'wendlandC2': WendlandC2Kernel,
}


def createKernel(kernelType: str, dimensions: int = 3) -> SphKernel:
    '''
    Create a kernel instance by type name.

    Parameters:
    -----------
    kernelType : str
        Kernel type: 'cubicSpline' or 'wendlandC2'
    dimensions : int
        Number of spatial dimensions (2 or 3)

    Returns:
    --------
    SphKernel : Kernel instance

    Raises:
    -------
    ValueError : If kernel type is unknown
    '''
    try:
        kernelClass = _kernelTypes[kernelType]
    except KeyError:
        raise ValueError(f'Unknown kernel type: {kernelType}') from None
    return kernelClass(dimensions)
