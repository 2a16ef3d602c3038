# -- Akinci 2012 Boundary Model -- #

'''
Boundary particle store for rigid-fluid coupling after Akinci et al.

A rigid body is represented by boundary particles sampled on its
surface. This class owns their parallel per-particle arrays

    x0  rest position      (N, 3)
    x   current position   (N, 3)
    v   velocity           (N, 3)
    V   artificial volume  (N,)

and, when strong coupling is enabled, the Gissler 2019 solver fields
(see StrongCouplingState). Particles have no identity beyond their
index in [0, N); all arrays always have N entries.

Lifecycle:
    model = BoundaryModelAkinci2012(search, config)
    model.initModel(rigidBody, len(samples), samples)
    model.computeBoundaryVolume()
    # per step, after search.zSort():
    model.performNeighborhoodSearchSort()

References:
-----------
Akinci et al. (2012) -- Versatile rigid-fluid coupling for
    incompressible SPH. ACM Trans. Graph. 31(4)
Gissler et al. (2019) -- Interlinked SPH pressure solvers for strong
    fluid-rigid coupling. ACM Trans. Graph. 38(1)

Sean Bowman [02/06/2026]
'''

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from boundaryCoupling.errors import (
    IndexOutOfRangeError,
    PersistenceFormatError,
    StrongCouplingDisabledError,
)
from boundaryCoupling.sph.fieldRegistry import FieldDescription, FieldRegistry, FieldType
from boundaryCoupling.sph.kernels import SphKernel, createKernel
from boundaryCoupling.sph.neighborSearch import NeighborhoodSearch
from boundaryCoupling.sph.protocols import (
    BinaryReader,
    BinaryWriter,
    BoundaryConfig,
    RigidBodyObject,
)
from boundaryCoupling.sph.resortSynchronizer import ResortSynchronizer
from boundaryCoupling.sph.strongCoupling import StrongCouplingState, resizeArray
from boundaryCoupling.sph.volumeEstimator import BoundaryVolumeEstimator

logger = logging.getLogger(__name__)


class BoundaryModelAkinci2012:
    '''
    Per-particle boundary data, volume estimation and resort protocol.

    Parameters:
    -----------
    neighborhoodSearch : NeighborhoodSearch
        Search structure the model registers its point set with
    config : BoundaryConfig | None
        Kernel, density and strong-coupling settings (defaults if None)
    kernel : SphKernel | None
        Kernel for the volume estimate (built from config if None)
    '''

    def __init__(
        self,
        neighborhoodSearch: NeighborhoodSearch,
        config: BoundaryConfig | None = None,
        kernel: SphKernel | None = None,
    ) -> None:
        self._config = config or BoundaryConfig()
        self._neighborhoodSearch = neighborhoodSearch
        self._kernel = kernel or createKernel(self._config.kernelType, self._config.dimensions)
        self._estimator = BoundaryVolumeEstimator(self._kernel, self._config.smoothingLength)

        self._rigidBody: RigidBodyObject | None = None
        self._pointSetIndex: int | None = None
        self._sorted: bool = False

        # Akinci 2012 arrays
        self._x0 = np.zeros((0, 3))
        self._x = np.zeros((0, 3))
        self._v = np.zeros((0, 3))
        self._V = np.zeros(0)

        # Gissler 2019 strong coupling
        self._density0: float = self._config.referenceDensity
        self._strongCoupling: StrongCouplingState | None = (
            StrongCouplingState.allocate(0) if self._config.strongCoupling else None
        )

        self._force = np.zeros(3)
        self._torque = np.zeros(3)

        self._fields = FieldRegistry()
        self._synchronizer = ResortSynchronizer()
        self._registerOwnedArrays()

    def _registerOwnedArrays(self) -> None:
        '''Expose owned arrays to the registry and the resort group.'''
        owned = [
            ('position0', FieldType.VECTOR3, lambda: self._x0, False),
            ('position', FieldType.VECTOR3, lambda: self._x, True),
            ('velocity', FieldType.VECTOR3, lambda: self._v, True),
            ('volume', FieldType.SCALAR, lambda: self._V, True),
        ]
        for name, fieldType, arrayFn, storeData in owned:
            self._synchronizer.register(name, arrayFn)
            self._fields.addField(FieldDescription(name, fieldType, array=arrayFn, storeData=storeData))

        if self._strongCoupling is None:
            return

        strongFields = [
            ('density', FieldType.SCALAR, True),
            ('pressure', FieldType.SCALAR, True),
            ('v_s', FieldType.VECTOR3, False),
            ('s', FieldType.SCALAR, False),
            ('v_rr', FieldType.VECTOR3, False),
            ('minus_rho_div_v_rr', FieldType.SCALAR, False),
        ]
        for name, fieldType, storeData in strongFields:
            arrayFn = self._strongArrayGetter(name)
            self._synchronizer.register(name, arrayFn)
            self._fields.addField(FieldDescription(name, fieldType, array=arrayFn, storeData=storeData))

    def _strongArrayGetter(self, name: str):
        return lambda: getattr(self._strongCoupling, name)

    ######################################################################
    # -- Properties -- #
    ######################################################################

    @property
    def config(self) -> BoundaryConfig:
        return self._config

    @property
    def kernel(self) -> SphKernel:
        return self._kernel

    @property
    def neighborhoodSearch(self) -> NeighborhoodSearch:
        return self._neighborhoodSearch

    @property
    def rigidBody(self) -> RigidBodyObject | None:
        '''Non-owning reference to the sampled rigid body.'''
        return self._rigidBody

    @property
    def positions(self) -> np.ndarray:
        return self._x

    @property
    def restPositions(self) -> np.ndarray:
        return self._x0

    @property
    def velocities(self) -> np.ndarray:
        return self._v

    @property
    def volumes(self) -> np.ndarray:
        return self._V

    @property
    def strongCoupling(self) -> StrongCouplingState | None:
        return self._strongCoupling

    @property
    def hasStrongCoupling(self) -> bool:
        return self._strongCoupling is not None

    @property
    def sortEpoch(self) -> int:
        '''Sort epoch of the last permutation applied to this model.'''
        return self._synchronizer.appliedEpoch

    def numberOfParticles(self) -> int:
        return self._x.shape[0]

    def getPointSetIndex(self) -> int | None:
        return self._pointSetIndex

    def isSorted(self) -> bool:
        return self._sorted

    ######################################################################
    # -- Field Registry -- #
    ######################################################################

    @property
    def fields(self) -> FieldRegistry:
        return self._fields

    def addField(self, field: FieldDescription) -> None:
        self._fields.addField(field)

    def getFields(self) -> tuple[FieldDescription, ...]:
        return self._fields.getFields()

    def getField(self, key: str | int) -> FieldDescription:
        return self._fields.getField(key)

    def numberOfFields(self) -> int:
        return self._fields.numberOfFields()

    def removeFieldByName(self, fieldName: str) -> None:
        self._fields.removeFieldByName(fieldName)

    ######################################################################
    # -- Lifecycle -- #
    ######################################################################

    def initModel(
        self,
        rigidBody: RigidBodyObject,
        numBoundaryParticles: int,
        boundaryParticles: np.ndarray,
    ) -> None:
        '''
        Populate the model from a surface sampling of a rigid body.

        Copies the samples into rest and current positions, zeroes
        velocities and volumes and registers (or rebinds) the model's
        point set with the neighborhood search.

        Parameters:
        -----------
        rigidBody : RigidBodyObject
            Sampled body; referenced, never mutated by the model
        numBoundaryParticles : int
            Number of samples N
        boundaryParticles : np.ndarray
            Sample positions, shape (N, 3)
        '''
        samples = np.asarray(boundaryParticles, dtype=float)
        if samples.shape != (numBoundaryParticles, 3):
            raise ValueError(
                f'Expected boundary particles of shape ({numBoundaryParticles}, 3), '
                f'got {samples.shape}'
            )

        self._reallocate(numBoundaryParticles)
        self._x0[...] = samples
        self._x[...] = samples
        self._v.fill(0.0)
        self._V.fill(0.0)

        self._rigidBody = rigidBody
        isDynamic = rigidBody.isDynamic() or rigidBody.isAnimated()
        if self._pointSetIndex is None:
            self._pointSetIndex = self._neighborhoodSearch.addPointSet(
                self._x,
                isDynamic=isDynamic,
                searchNeighbors=True,
                findNeighbors=True,
                user=self,
            )
        else:
            self._rebindPointSet()
            self._neighborhoodSearch.pointSet(self._pointSetIndex).isDynamic = isDynamic
        self._sorted = False

        logger.info(
            'Boundary model initialized with %d particles (point set %d)',
            numBoundaryParticles, self._pointSetIndex,
        )

    def resize(self, numBoundaryParticles: int) -> None:
        '''
        Reallocate all arrays to a new particle count.

        The first min(N, newCount) entries are kept, new entries are
        zero. Any permutation pending in the search structure refers
        to the old arrays and is discarded.
        '''
        if numBoundaryParticles < 0:
            raise ValueError(f'Particle count must be non-negative, got {numBoundaryParticles}')

        oldCount = self.numberOfParticles()
        self._reallocate(numBoundaryParticles)
        if self._pointSetIndex is not None:
            self._rebindPointSet()
        self._sorted = False
        logger.debug('Boundary model resized %d -> %d', oldCount, numBoundaryParticles)

    def _reallocate(self, n: int) -> None:
        self._x0 = resizeArray(self._x0, n)
        self._x = resizeArray(self._x, n)
        self._v = resizeArray(self._v, n)
        self._V = resizeArray(self._V, n)
        if self._strongCoupling is not None:
            self._strongCoupling.resize(n)

    def _rebindPointSet(self) -> None:
        self._neighborhoodSearch.resizePointSet(self._pointSetIndex, self._x)
        self._synchronizer.discardPending(self._neighborhoodSearch.pointSet(self._pointSetIndex))

    def reset(self) -> None:
        '''
        Clear per-step state: velocities, volumes, strong-coupling
        fields and force/torque accumulators.

        Rest and current positions are kept; re-deriving them from
        the rigid pose is up to the caller (see updateBoundaryParticles).
        '''
        self._sorted = False
        self._v.fill(0.0)
        self._V.fill(0.0)
        if self._strongCoupling is not None:
            self._strongCoupling.reset()
        self.clearForceAndTorque()

    ######################################################################
    # -- Volume Estimation and Resorting -- #
    ######################################################################

    def boundaryNeighbors(self) -> list[BoundaryModelAkinci2012]:
        '''Other boundary models registered with the same neighborhood search.'''
        return [
            pointSet.user for pointSet in self._neighborhoodSearch.pointSets()
            if isinstance(pointSet.user, BoundaryModelAkinci2012) and pointSet.user is not self
        ]

    def computeBoundaryVolume(
        self,
        otherModels: Sequence[BoundaryModelAkinci2012] | None = None,
        updateNeighbors: bool = True,
    ) -> None:
        '''
        Recompute the Akinci 2012 volume of every particle.

        Parameters:
        -----------
        otherModels : Sequence[BoundaryModelAkinci2012] | None
            Further boundary models whose particles contribute to the
            kernel sums; None uses every boundary model sharing this
            neighborhood search, () restricts the sum to this model
        updateNeighbors : bool
            Rebuild the neighbor lists first; pass False only if
            findNeighbors ran after the last position change or resort
        '''
        if self._pointSetIndex is None:
            raise RuntimeError('computeBoundaryVolume called before initModel')
        if otherModels is None:
            otherModels = self.boundaryNeighbors()
        if updateNeighbors:
            self._neighborhoodSearch.findNeighbors()
        self._V[...] = self._estimator.estimate(self, otherModels)

    def performNeighborhoodSearchSort(self) -> None:
        '''
        Apply the search structure's pending permutation to all arrays.

        Sorts the owned arrays, the strong-coupling arrays and every
        array-backed registry field in one step. A permutation epoch
        is applied at most once; without a new permutation from the
        search structure this is a no-op.
        '''
        if self._pointSetIndex is None or self.numberOfParticles() == 0:
            return

        pointSet = self._neighborhoodSearch.pointSet(self._pointSetIndex)
        if self._synchronizer.apply(pointSet, self.numberOfParticles(), self._fields):
            self._sorted = True

    ######################################################################
    # -- Persistence -- #
    ######################################################################

    def saveState(self, binWriter: BinaryWriter) -> None:
        '''
        Write the particle count, all allocated arrays and the
        reference density / body-level values.

        Registry descriptors and extension arrays are not written.
        '''
        binWriter.write(self.numberOfParticles(), np.uint32)
        binWriter.write(self.hasStrongCoupling, np.bool_)
        for array in self._persistentArrays():
            binWriter.writeBuffer(array)
        binWriter.write(self._density0, np.float64)
        if self._strongCoupling is not None:
            binWriter.writeBuffer(self._strongCoupling.v_rr_body)
            binWriter.writeBuffer(self._strongCoupling.omega_rr_body)
        logger.info('Saved boundary state (%d particles)', self.numberOfParticles())

    def loadState(self, binReader: BinaryReader) -> None:
        '''
        Read a state written by saveState into this model.

        The model must already have the stored particle count (use
        resize or initModel first). Nothing is modified unless the
        whole state could be read. Afterwards the model is unsorted.

        Raises:
        -------
        PersistenceFormatError : On count / layout mismatch or a truncated stream
        '''
        n = self.numberOfParticles()
        try:
            storedCount = binReader.read(np.uint32)
            storedStrong = bool(binReader.read(np.bool_))
            if storedCount != n:
                raise PersistenceFormatError(
                    f'Stored state has {storedCount} particles, model has {n}'
                )
            if storedStrong != self.hasStrongCoupling:
                raise PersistenceFormatError(
                    f'Stored strong-coupling flag {storedStrong} does not match '
                    f'model ({self.hasStrongCoupling})'
                )
            loaded = [
                binReader.readBuffer(array.dtype, array.shape)
                for array in self._persistentArrays()
            ]
            density0 = binReader.read(np.float64)
            bodyValues = []
            if self._strongCoupling is not None:
                bodyValues = [binReader.readBuffer(np.float64, (3,)) for _ in range(2)]
        except EOFError as exc:
            raise PersistenceFormatError(f'Truncated boundary state: {exc}') from exc

        # In place, so the point set keeps referencing the position array
        for target, values in zip(self._persistentArrays(), loaded):
            target[...] = values
        self._density0 = density0
        if self._strongCoupling is not None:
            self._strongCoupling.v_rr_body[...] = bodyValues[0]
            self._strongCoupling.omega_rr_body[...] = bodyValues[1]

        self._sorted = False
        if self._pointSetIndex is not None:
            self._synchronizer.discardPending(
                self._neighborhoodSearch.pointSet(self._pointSetIndex)
            )
        logger.info('Loaded boundary state (%d particles)', n)

    def _persistentArrays(self) -> list[np.ndarray]:
        arrays = [self._x0, self._x, self._v, self._V]
        if self._strongCoupling is not None:
            arrays.extend(self._strongCoupling.arrays())
        return arrays

    ######################################################################
    # -- Rigid Body Coupling -- #
    ######################################################################

    def _requireRigidBody(self) -> RigidBodyObject:
        if self._rigidBody is None:
            raise RuntimeError('Boundary model has no rigid body; call initModel first')
        return self._rigidBody

    def updateBoundaryParticles(self) -> None:
        '''
        Replay the rigid transform on all particles.

        Rest positions are taken in the body frame:
        x = R * x0 + t, v = v_body + omega x (x - t).
        '''
        rigidBody = self._requireRigidBody()
        rotation = rigidBody.getRotation()
        origin = rigidBody.getPosition()
        self._x[...] = self._x0 @ rotation.T + origin
        self._v[...] = rigidBody.getVelocity() + np.cross(
            rigidBody.getAngularVelocity(), self._x - origin
        )

    def getPointVelocity(self, x: np.ndarray) -> np.ndarray:
        '''Velocity of the rigid body at world point x.'''
        rigidBody = self._requireRigidBody()
        return rigidBody.getVelocity() + np.cross(
            rigidBody.getAngularVelocity(), np.asarray(x) - rigidBody.getPosition()
        )

    def addForce(self, position: np.ndarray, force: np.ndarray) -> None:
        '''
        Accumulate a fluid force acting at a world position.

        Only dynamic bodies react; the torque is taken about the
        body origin.
        '''
        rigidBody = self._requireRigidBody()
        if not rigidBody.isDynamic():
            return
        force = np.asarray(force, dtype=float)
        self._force += force
        self._torque += np.cross(np.asarray(position) - rigidBody.getPosition(), force)

    def getForceAndTorque(self) -> tuple[np.ndarray, np.ndarray]:
        return (self._force.copy(), self._torque.copy())

    def clearForceAndTorque(self) -> None:
        self._force.fill(0.0)
        self._torque.fill(0.0)

    def applyForceAndTorque(self) -> None:
        '''Hand the accumulated force and torque to the rigid body and clear them.'''
        rigidBody = self._requireRigidBody()
        if rigidBody.isDynamic():
            rigidBody.addForce(self._force.copy())
            rigidBody.addTorque(self._torque.copy())
        self.clearForceAndTorque()

    ######################################################################
    # -- Indexed Accessors -- #
    ######################################################################

    def _checkIndex(self, i: int) -> None:
        if __debug__ and not 0 <= i < self._x.shape[0]:
            raise IndexOutOfRangeError(
                f'Particle index {i} out of range [0, {self._x.shape[0]})'
            )

    def _requireStrongCoupling(self) -> StrongCouplingState:
        if self._strongCoupling is None:
            raise StrongCouplingDisabledError(
                'Strong coupling fields are not allocated for this boundary model'
            )
        return self._strongCoupling

    def getPosition0(self, i: int) -> np.ndarray:
        self._checkIndex(i)
        return self._x0[i]

    def setPosition0(self, i: int, pos: np.ndarray) -> None:
        self._checkIndex(i)
        self._x0[i] = pos

    def getPosition(self, i: int) -> np.ndarray:
        self._checkIndex(i)
        return self._x[i]

    def setPosition(self, i: int, pos: np.ndarray) -> None:
        self._checkIndex(i)
        self._x[i] = pos

    def getVelocity(self, i: int) -> np.ndarray:
        self._checkIndex(i)
        return self._v[i]

    def setVelocity(self, i: int, vel: np.ndarray) -> None:
        self._checkIndex(i)
        self._v[i] = vel

    def getVolume(self, i: int) -> float:
        self._checkIndex(i)
        return float(self._V[i])

    def setVolume(self, i: int, val: float) -> None:
        self._checkIndex(i)
        self._V[i] = val

    def getDensity0(self) -> float:
        return self._density0

    def setDensity0(self, value: float) -> None:
        self._density0 = float(value)

    #--------------------------------------------------------------------#
    # Strong coupling (Gissler 2019)
    #--------------------------------------------------------------------#

    def getDensity(self, i: int) -> float:
        self._checkIndex(i)
        return float(self._requireStrongCoupling().density[i])

    def setDensity(self, i: int, value: float) -> None:
        self._checkIndex(i)
        self._requireStrongCoupling().density[i] = value

    def getPressure(self, i: int) -> float:
        self._checkIndex(i)
        return float(self._requireStrongCoupling().pressure[i])

    def setPressure(self, i: int, value: float) -> None:
        self._checkIndex(i)
        self._requireStrongCoupling().pressure[i] = value

    def getV_s(self, i: int) -> np.ndarray:
        self._checkIndex(i)
        return self._requireStrongCoupling().v_s[i]

    def setV_s(self, i: int, value: np.ndarray) -> None:
        self._checkIndex(i)
        self._requireStrongCoupling().v_s[i] = value

    def getV_rr(self, i: int) -> np.ndarray:
        self._checkIndex(i)
        return self._requireStrongCoupling().v_rr[i]

    def setV_rr(self, i: int, value: np.ndarray) -> None:
        self._checkIndex(i)
        self._requireStrongCoupling().v_rr[i] = value

    def getSourceTerm(self, i: int) -> float:
        self._checkIndex(i)
        return float(self._requireStrongCoupling().s[i])

    def setSourceTerm(self, i: int, value: float) -> None:
        self._checkIndex(i)
        self._requireStrongCoupling().s[i] = value

    def getMinus_rho_div_v_rr(self, i: int) -> float:
        self._checkIndex(i)
        return float(self._requireStrongCoupling().minus_rho_div_v_rr[i])

    def setMinus_rho_div_v_rr(self, i: int, value: float) -> None:
        self._checkIndex(i)
        self._requireStrongCoupling().minus_rho_div_v_rr[i] = value

    def getV_rr_body(self) -> np.ndarray:
        return self._requireStrongCoupling().v_rr_body

    def setV_rr_body(self, value: np.ndarray) -> None:
        self._requireStrongCoupling().v_rr_body[...] = value

    def getOmega_rr_body(self) -> np.ndarray:
        return self._requireStrongCoupling().omega_rr_body

    def setOmega_rr_body(self, value: np.ndarray) -> None:
        self._requireStrongCoupling().omega_rr_body[...] = value
