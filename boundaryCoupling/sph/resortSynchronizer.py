# -- Resort Synchronizer -- #

'''
Applies neighbor-search permutations to all per-particle arrays.

The owner registers each array it keeps (as a callable, so arrays
reallocated by resize are picked up) and passes its field registry
when sorting; array-backed registry fields are sorted in the same
pass. Either every array is permuted or none is: all lengths are
checked before the first array is touched.

Permutations are defined relative to the search structure's current
ordering, so applying one twice silently scrambles the data. The
synchronizer records the sort epoch of the last permutation it
applied and refuses to apply that epoch again.

Sean Bowman [02/06/2026]
'''

from __future__ import annotations

import logging
from typing import Callable

import numpy as np

from boundaryCoupling.errors import ResortError
from boundaryCoupling.sph.fieldRegistry import FieldRegistry
from boundaryCoupling.sph.neighborSearch import PointSet

logger = logging.getLogger(__name__)


class ResortSynchronizer:
    '''
    Keeps a group of parallel per-particle arrays in lockstep.
    '''

    def __init__(self) -> None:
        self._arrays: dict[str, Callable[[], np.ndarray | None]] = {}
        self._appliedEpoch: int = 0

    @property
    def appliedEpoch(self) -> int:
        '''Sort epoch of the last permutation applied (0 = none).'''
        return self._appliedEpoch

    def register(self, name: str, arrayFn: Callable[[], np.ndarray | None]) -> None:
        '''
        Add an owned array to the group.

        arrayFn returns the current array, or None while the array is
        not allocated (it is then skipped).
        '''
        self._arrays[name] = arrayFn

    def unregister(self, name: str) -> None:
        self._arrays.pop(name, None)

    def isPending(self, pointSet: PointSet) -> bool:
        '''True if the point set holds a permutation not yet applied here.'''
        return pointSet.sortTable is not None and pointSet.sortEpoch != self._appliedEpoch

    def discardPending(self, pointSet: PointSet) -> None:
        '''Mark the point set's current epoch as consumed without applying it.'''
        self._appliedEpoch = pointSet.sortEpoch

    def collectArrays(self, registry: FieldRegistry | None = None) -> list[tuple[str, np.ndarray]]:
        '''
        Every distinct array that takes part in a resort.

        Raises:
        -------
        ResortError : If two different arrays share memory
        '''
        candidates: list[tuple[str, np.ndarray | None]] = [
            (name, arrayFn()) for name, arrayFn in self._arrays.items()
        ]
        if registry is not None:
            candidates.extend((f.name, f.data()) for f in registry.arrayFields())

        collected: list[tuple[str, np.ndarray]] = []
        for name, array in candidates:
            if array is None:
                continue
            if any(array is other for _, other in collected):
                continue
            for otherName, other in collected:
                if np.may_share_memory(array, other):
                    raise ResortError(
                        f'Arrays {name!r} and {otherName!r} overlap in memory'
                    )
            collected.append((name, array))
        return collected

    def apply(
        self,
        pointSet: PointSet,
        nParticles: int,
        registry: FieldRegistry | None = None,
    ) -> bool:
        '''
        Apply the point set's pending permutation to every array.

        Parameters:
        -----------
        pointSet : PointSet
            Point set holding the permutation
        nParticles : int
            Expected length of every array
        registry : FieldRegistry | None
            Registry whose array-backed fields are sorted as well

        Returns:
        --------
        bool : True if a permutation was applied, False if none was pending

        Raises:
        -------
        ResortError : If any array does not have nParticles entries;
            no array is modified in that case
        '''
        if not self.isPending(pointSet):
            return False

        arrays = self.collectArrays(registry)
        for name, array in arrays:
            if array.shape[0] != nParticles:
                raise ResortError(
                    f'Field {name!r} has {array.shape[0]} entries, expected {nParticles}'
                )
        if pointSet.nPoints != nParticles:
            raise ResortError(
                f'Point set has {pointSet.nPoints} points, expected {nParticles}'
            )

        for _, array in arrays:
            pointSet.sortField(array)

        self._appliedEpoch = pointSet.sortEpoch
        logger.debug(
            'Applied sort epoch %d to %d arrays', self._appliedEpoch, len(arrays)
        )
        return True
