# -- Point-Set Neighborhood Search -- #

'''
Uniform-grid neighborhood search over registered point sets.

Each simulation object (a fluid phase, a boundary model) registers its
position array as a point set and receives a point-set index. The
search bins every point into grid cells of size equal to the search
radius; a query only visits the 9 (2D) or 27 (3D) cells around a
point. Neighbor lists are stored per (point set, other point set) in
compressed sparse row form.

The search also produces spatial-locality permutations (z-order of the
cell coordinates). A permutation is only stored on the point set as a
pending sort table with a sort epoch; applying it to the actual
per-particle arrays is the owner's job (see PointSet.sortField).

References:
-----------
Ihmsen et al. (2011) -- Parallel Neighbor-Search for SPH
Morton (1966) -- A computer oriented geodetic data base and a new
    technique in file sequencing

Sean Bowman [02/05/2026]
'''

from __future__ import annotations

import itertools
import logging
from typing import Any

import numpy as np

from boundaryCoupling.errors import ResortError

logger = logging.getLogger(__name__)


#--------------------------------------------------------------------#
# -- Point Set -- #
#--------------------------------------------------------------------#

class PointSet:
    '''
    One registered array of points plus its neighbor lists.

    The point set references the owner's position array; it never
    copies or reallocates it. Owners that reallocate their arrays must
    call NeighborhoodSearch.resizePointSet.

    Parameters:
    -----------
    positions : np.ndarray
        Point positions, shape (N, dim)
    isDynamic : bool
        Whether the points move (dynamic sets are z-sorted)
    searchNeighbors : bool
        Whether neighbors are searched for the points of this set
    findNeighbors : bool
        Whether points of this set can be found by other sets
    user : Any
        Owner back-reference (e.g. the boundary model)
    '''

    def __init__(
        self,
        positions: np.ndarray,
        isDynamic: bool = True,
        searchNeighbors: bool = True,
        findNeighbors: bool = True,
        user: Any = None,
    ) -> None:
        self._positions = positions
        self.isDynamic = isDynamic
        self.searchNeighbors = searchNeighbors
        self.findNeighbors = findNeighbors
        self.user = user

        self._neighborOffsets: dict[int, np.ndarray] = {}
        self._neighborIndices: dict[int, np.ndarray] = {}
        self._sortTable: np.ndarray | None = None
        self._sortEpoch: int = 0

    @property
    def positions(self) -> np.ndarray:
        return self._positions

    @property
    def nPoints(self) -> int:
        return self._positions.shape[0]

    @property
    def sortTable(self) -> np.ndarray | None:
        '''Pending permutation: sorted[i] = unsorted[sortTable[i]].'''
        return self._sortTable

    @property
    def sortEpoch(self) -> int:
        '''Counter incremented every time a new permutation is installed.'''
        return self._sortEpoch

    #--------------------------------------------------------------------#
    # Neighbor access
    #--------------------------------------------------------------------#

    def hasNeighborList(self, otherSet: int) -> bool:
        return otherSet in self._neighborOffsets

    def nNeighbors(self, otherSet: int, i: int) -> int:
        '''Number of neighbors of point i within point set otherSet.'''
        offsets = self._neighborOffsets[otherSet]
        return int(offsets[i + 1] - offsets[i])

    def neighbor(self, otherSet: int, i: int, j: int) -> int:
        '''Index (in otherSet) of the j-th neighbor of point i.'''
        return int(self._neighborIndices[otherSet][self._neighborOffsets[otherSet][i] + j])

    def neighbors(self, otherSet: int, i: int) -> np.ndarray:
        '''All neighbor indices of point i within otherSet.'''
        offsets = self._neighborOffsets[otherSet]
        return self._neighborIndices[otherSet][offsets[i]:offsets[i + 1]]

    def neighborPairs(self, otherSet: int) -> tuple[np.ndarray, np.ndarray]:
        '''
        Flattened neighbor list against otherSet.

        Returns:
        --------
        tuple[np.ndarray, np.ndarray] :
            (iIndices, jIndices) with i in this set and j in otherSet,
            grouped by i in ascending order
        '''
        offsets = self._neighborOffsets[otherSet]
        counts = np.diff(offsets)
        iIndices = np.repeat(np.arange(self.nPoints, dtype=np.int64), counts)
        return (iIndices, self._neighborIndices[otherSet])

    #--------------------------------------------------------------------#
    # Sorting
    #--------------------------------------------------------------------#

    def setSortTable(self, permutation: np.ndarray) -> None:
        '''
        Install a new pending permutation and advance the sort epoch.

        Parameters:
        -----------
        permutation : np.ndarray
            Permutation of [0, N), shape (N,)

        Raises:
        -------
        ResortError : If the array is not a permutation of [0, N)
        '''
        permutation = np.asarray(permutation)
        n = self.nPoints
        if permutation.shape != (n,):
            raise ResortError(
                f'Sort table has shape {permutation.shape}, expected ({n},)'
            )
        if not np.issubdtype(permutation.dtype, np.integer):
            raise ResortError(f'Sort table must be integral, got {permutation.dtype}')
        if n > 0 and not np.array_equal(np.sort(permutation), np.arange(n)):
            raise ResortError('Sort table is not a permutation of [0, N)')

        self._sortTable = permutation.astype(np.int64, copy=True)
        self._sortEpoch += 1

    def sortField(self, array: np.ndarray) -> None:
        '''
        Reorder a per-point array in place with the pending permutation.

        No-op when no permutation is pending. The array keeps its
        identity, so outside references remain valid.
        '''
        if self._sortTable is None:
            return
        if array.shape[0] != self.nPoints:
            raise ResortError(
                f'Cannot sort array with {array.shape[0]} entries '
                f'using a table for {self.nPoints} points'
            )
        array[...] = array[self._sortTable]

    def _rebind(self, positions: np.ndarray) -> None:
        self._positions = positions
        self._neighborOffsets.clear()
        self._neighborIndices.clear()
        self._sortTable = None

    def _storeNeighbors(self, otherSet: int, iIdx: np.ndarray, jIdx: np.ndarray) -> None:
        order = np.lexsort((jIdx, iIdx))
        iSorted = iIdx[order]
        counts = np.bincount(iSorted, minlength=self.nPoints)
        offsets = np.zeros(self.nPoints + 1, dtype=np.int64)
        np.cumsum(counts, out=offsets[1:])
        self._neighborOffsets[otherSet] = offsets
        self._neighborIndices[otherSet] = jIdx[order].astype(np.int64)


#--------------------------------------------------------------------#
# -- Neighborhood Search -- #
#--------------------------------------------------------------------#

class NeighborhoodSearch:
    '''
    Fixed-radius neighborhood search over multiple point sets.

    Parameters:
    -----------
    radius : float
        Search radius [m], normally the kernel support radius
    zSortEnabled : bool
        If False, zSort() leaves all point sets unsorted
    '''

    def __init__(self, radius: float, zSortEnabled: bool = True) -> None:
        if radius <= 0.0:
            raise ValueError(f'Search radius must be positive, got {radius}')
        self._radius = radius
        self._zSortEnabled = zSortEnabled
        self._pointSets: list[PointSet] = []

    @property
    def radius(self) -> float:
        return self._radius

    def addPointSet(
        self,
        positions: np.ndarray,
        isDynamic: bool = True,
        searchNeighbors: bool = True,
        findNeighbors: bool = True,
        user: Any = None,
    ) -> int:
        '''
        Register a position array and return its point-set index.

        Parameters:
        -----------
        positions : np.ndarray
            Point positions, shape (N, dim); referenced, not copied
        isDynamic : bool
            Whether the points move between searches
        searchNeighbors : bool
            Whether neighbor lists are built for this set's points
        findNeighbors : bool
            Whether this set's points appear in other sets' lists
        user : Any
            Owner back-reference

        Returns:
        --------
        int : Point-set index
        '''
        pointSet = PointSet(positions, isDynamic, searchNeighbors, findNeighbors, user)
        self._pointSets.append(pointSet)
        index = len(self._pointSets) - 1
        logger.debug('Registered point set %d with %d points', index, pointSet.nPoints)
        return index

    def resizePointSet(self, index: int, positions: np.ndarray) -> None:
        '''Rebind a point set to a reallocated array; drops stale lists and tables.'''
        self._pointSets[index]._rebind(positions)

    def pointSet(self, index: int) -> PointSet:
        return self._pointSets[index]

    def pointSets(self) -> tuple[PointSet, ...]:
        return tuple(self._pointSets)

    def numberOfPointSets(self) -> int:
        return len(self._pointSets)

    #--------------------------------------------------------------------#
    # Neighbor search
    #--------------------------------------------------------------------#

    def findNeighbors(self) -> None:
        '''
        Rebuild the neighbor lists of every searching point set.

        A point never appears in its own neighbor list.
        '''
        grids = [
            self._buildGrid(ps.positions) if ps.findNeighbors else None
            for ps in self._pointSets
        ]

        for aIndex, setA in enumerate(self._pointSets):
            if not setA.searchNeighbors:
                continue
            for bIndex, setB in enumerate(self._pointSets):
                if grids[bIndex] is None:
                    continue
                iIdx, jIdx = self._queryGrid(
                    setA.positions, setB.positions, grids[bIndex],
                    excludeSelf=(aIndex == bIndex),
                )
                setA._storeNeighbors(bIndex, iIdx, jIdx)

    def _cellCoordinates(self, positions: np.ndarray) -> np.ndarray:
        return np.floor(positions / self._radius).astype(np.int64)

    def _buildGrid(self, positions: np.ndarray) -> dict[tuple, np.ndarray]:
        '''Map cell key -> array of point indices inside the cell.'''
        cellIndices = self._cellCoordinates(positions)
        cellDict: dict[tuple, list[int]] = {}
        for i in range(len(positions)):
            cellDict.setdefault(tuple(cellIndices[i]), []).append(i)
        return {k: np.array(v, dtype=np.int64) for k, v in cellDict.items()}

    def _queryGrid(
        self,
        queryPositions: np.ndarray,
        targetPositions: np.ndarray,
        targetGrid: dict[tuple, np.ndarray],
        excludeSelf: bool,
    ) -> tuple[np.ndarray, np.ndarray]:
        '''
        Find all (i, j) with |x_i - y_j| < radius.

        Query points are grouped by cell, so distance checks are
        vectorized per (query cell, target cell) block.
        '''
        empty = (np.array([], dtype=np.int64), np.array([], dtype=np.int64))
        if len(queryPositions) == 0 or not targetGrid:
            return empty

        dimensions = queryPositions.shape[1]
        stencil = list(itertools.product((-1, 0, 1), repeat=dimensions))
        radiusSq = self._radius * self._radius

        iChunks: list[np.ndarray] = []
        jChunks: list[np.ndarray] = []

        for cellKey, queryIndices in self._buildGrid(queryPositions).items():
            candidates: list[np.ndarray] = []
            for offset in stencil:
                neighborKey = tuple(c + o for c, o in zip(cellKey, offset))
                neighborIndices = targetGrid.get(neighborKey)
                if neighborIndices is not None:
                    candidates.append(neighborIndices)
            if not candidates:
                continue
            targetIndices = np.concatenate(candidates)

            diff = (
                queryPositions[queryIndices][:, np.newaxis, :]
                - targetPositions[targetIndices][np.newaxis, :, :]
            )
            distSq = np.sum(diff * diff, axis=2)
            localI, localJ = np.nonzero(distSq < radiusSq)

            globalI = queryIndices[localI]
            globalJ = targetIndices[localJ]
            if excludeSelf:
                keep = globalI != globalJ
                globalI, globalJ = globalI[keep], globalJ[keep]

            if len(globalI) > 0:
                iChunks.append(globalI)
                jChunks.append(globalJ)

        if not iChunks:
            return empty
        return (np.concatenate(iChunks), np.concatenate(jChunks))

    #--------------------------------------------------------------------#
    # Spatial sorting
    #--------------------------------------------------------------------#

    def zSort(self) -> None:
        '''
        Compute a z-order permutation for every dynamic point set.

        The permutation is installed as the pending sort table of
        each set (advancing its sort epoch); the arrays themselves are
        not touched.
        '''
        if not self._zSortEnabled:
            return

        for index, pointSet in enumerate(self._pointSets):
            if not pointSet.isDynamic or pointSet.nPoints == 0:
                continue
            codes = mortonCodes(self._cellCoordinates(pointSet.positions))
            pointSet.setSortTable(np.argsort(codes, kind='stable'))
            logger.debug(
                'Point set %d z-sorted (epoch %d)', index, pointSet.sortEpoch
            )


#--------------------------------------------------------------------#
# -- Morton Encoding -- #
#--------------------------------------------------------------------#

def _spreadBits(values: np.ndarray, dimensions: int) -> np.ndarray:
    '''Insert (dimensions - 1) zero bits between the low bits of values.'''
    x = values.astype(np.uint64)
    if dimensions == 2:
        x &= np.uint64(0xFFFFFFFF)
        x = (x | (x << np.uint64(16))) & np.uint64(0x0000FFFF0000FFFF)
        x = (x | (x << np.uint64(8))) & np.uint64(0x00FF00FF00FF00FF)
        x = (x | (x << np.uint64(4))) & np.uint64(0x0F0F0F0F0F0F0F0F)
        x = (x | (x << np.uint64(2))) & np.uint64(0x3333333333333333)
        x = (x | (x << np.uint64(1))) & np.uint64(0x5555555555555555)
    else:
        x &= np.uint64(0x1FFFFF)
        x = (x | (x << np.uint64(32))) & np.uint64(0x1F00000000FFFF)
        x = (x | (x << np.uint64(16))) & np.uint64(0x1F0000FF0000FF)
        x = (x | (x << np.uint64(8))) & np.uint64(0x100F00F00F00F00F)
        x = (x | (x << np.uint64(4))) & np.uint64(0x10C30C30C30C30C3)
        x = (x | (x << np.uint64(2))) & np.uint64(0x1249249249249249)
    return x


def mortonCodes(cellCoordinates: np.ndarray) -> np.ndarray:
    '''
    Interleave integer cell coordinates into z-order keys.

    Coordinates are shifted to be non-negative first, so any
    bounding box works.

    Parameters:
    -----------
    cellCoordinates : np.ndarray
        Integer cell coordinates, shape (N, 2) or (N, 3)

    Returns:
    --------
    np.ndarray : uint64 Morton codes, shape (N,)
    '''
    dimensions = cellCoordinates.shape[1]
    if dimensions not in (2, 3):
        raise ValueError(f'Morton codes need 2 or 3 dimensions, got {dimensions}')

    shifted = cellCoordinates - cellCoordinates.min(axis=0)
    codes = np.zeros(len(cellCoordinates), dtype=np.uint64)
    for d in range(dimensions):
        codes |= _spreadBits(shifted[:, d], dimensions) << np.uint64(d)
    return codes
