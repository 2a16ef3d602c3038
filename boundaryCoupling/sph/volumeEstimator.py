# -- Akinci 2012 Boundary Volume Estimation -- #

'''
Artificial volumes of boundary particles by kernel summation.

Each boundary particle gets

    V_i = rho_0 / (W(0) + sum_j W(x_i - x_j))

where j runs over the boundary neighbors of i reported by the neighbor
search (from the particle's own boundary model and, optionally, from
other boundary models). Used as a weight in fluid density and pressure
sums, V_i makes an irregularly sampled rigid surface behave like an
SPH-consistent pressure boundary: densely sampled regions get small
volumes and sparse regions get large ones.

Degenerate particles (no neighbor at all, or a kernel sum that is
non-finite or not above constants.volumeSumEpsilon) get V_i = 0.

All pair computations are vectorized: the neighbor lists are
flattened into (i, j) index arrays and summed with np.bincount.
Each particle's result depends only on positions, so the pass is
read-only over positions and writes each V_i once.

References:
-----------
Akinci et al. (2012) -- Versatile rigid-fluid coupling for
    incompressible SPH, Eq. 4-5

Sean Bowman [02/06/2026]
'''

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from boundaryCoupling import constants as const
from boundaryCoupling.sph.kernels import SphKernel

logger = logging.getLogger(__name__)


NeighborGroup = tuple[np.ndarray, np.ndarray, np.ndarray]


def computeBoundaryVolumes(
    positions: np.ndarray,
    neighborGroups: Sequence[NeighborGroup],
    kernel: SphKernel,
    smoothingLength: float,
    referenceDensity: float,
) -> np.ndarray:
    '''
    Evaluate the Akinci 2012 volume for every particle.

    Parameters:
    -----------
    positions : np.ndarray
        Boundary particle positions, shape (N, 3)
    neighborGroups : Sequence[tuple[np.ndarray, np.ndarray, np.ndarray]]
        One (iIndices, jIndices, otherPositions) entry per neighboring
        point set; particle i of this model neighbors particle j of
        otherPositions. Self pairs (i, i) must not be listed.
    kernel : SphKernel
        Smoothing kernel W
    smoothingLength : float
        Smoothing length h [m]
    referenceDensity : float
        Reference density rho_0

    Returns:
    --------
    np.ndarray : Volumes, shape (N,), zero for degenerate particles
    '''
    n = positions.shape[0]
    kernelSums = np.full(n, kernel.evaluate(0.0, smoothingLength))
    neighborCounts = np.zeros(n, dtype=np.int64)

    for iIdx, jIdx, otherPositions in neighborGroups:
        if len(iIdx) == 0:
            continue
        drVecs = positions[iIdx] - otherPositions[jIdx]
        distances = np.linalg.norm(drVecs, axis=1)
        weights = kernel.evaluateBatch(distances, smoothingLength)
        kernelSums += np.bincount(iIdx, weights=weights, minlength=n)
        neighborCounts += np.bincount(iIdx, minlength=n)

    valid = (
        (neighborCounts > 0)
        & np.isfinite(kernelSums)
        & (kernelSums > const.volumeSumEpsilon)
    )

    volumes = np.zeros(n)
    volumes[valid] = referenceDensity / kernelSums[valid]

    nDegenerate = n - int(np.count_nonzero(valid))
    if nDegenerate > 0:
        logger.warning(
            '%d of %d boundary particles have no neighbors; volume set to 0',
            nDegenerate, n,
        )
    return volumes


class BoundaryVolumeEstimator:
    '''
    Computes boundary volumes for models registered in one neighbor search.

    Parameters:
    -----------
    kernel : SphKernel
        Smoothing kernel W
    smoothingLength : float
        Smoothing length h [m]
    '''

    def __init__(self, kernel: SphKernel, smoothingLength: float) -> None:
        self._kernel = kernel
        self._smoothingLength = smoothingLength

    @property
    def kernel(self) -> SphKernel:
        return self._kernel

    @property
    def smoothingLength(self) -> float:
        return self._smoothingLength

    def neighborGroups(self, model, otherModels: Sequence = ()) -> list[NeighborGroup]:
        '''
        Collect the flattened neighbor lists of model against itself
        and against every other boundary model.
        '''
        pointSet = model.neighborhoodSearch.pointSet(model.getPointSetIndex())
        groups: list[NeighborGroup] = []
        for source in (model, *otherModels):
            sourceIndex = source.getPointSetIndex()
            if not pointSet.hasNeighborList(sourceIndex):
                continue
            iIdx, jIdx = pointSet.neighborPairs(sourceIndex)
            groups.append((iIdx, jIdx, source.positions))
        return groups

    def estimate(self, model, otherModels: Sequence = ()) -> np.ndarray:
        '''
        Volumes for every particle of model.

        The neighbor lists must be current (NeighborhoodSearch.findNeighbors
        after the last position change or resort).
        '''
        return computeBoundaryVolumes(
            model.positions,
            self.neighborGroups(model, otherModels),
            self._kernel,
            self._smoothingLength,
            model.getDensity0(),
        )
