# -- Shared Test Fixtures -- #

'''Shared fixtures for the boundary model tests.'''

import numpy as np
import pytest

from boundaryCoupling.sph.boundaryModel import BoundaryModelAkinci2012
from boundaryCoupling.sph.boundarySampling import samplePlane
from boundaryCoupling.sph.neighborSearch import NeighborhoodSearch
from boundaryCoupling.sph.protocols import BoundaryConfig
from boundaryCoupling.sph.rigidBody import RigidBody


SPACING = 0.1


@pytest.fixture
def config():
    '''Config whose sampling spacing is SPACING and support radius 2 * SPACING.'''
    return BoundaryConfig(particleRadius=SPACING / 2.0, smoothingLengthRatio=1.0)


@pytest.fixture
def strongConfig():
    return BoundaryConfig(
        particleRadius=SPACING / 2.0, smoothingLengthRatio=1.0, strongCoupling=True
    )


@pytest.fixture
def search(config):
    return NeighborhoodSearch(config.supportRadius, zSortEnabled=config.zSort)


@pytest.fixture
def staticBody():
    return RigidBody()


@pytest.fixture
def dynamicBody():
    return RigidBody(dynamic=True)


@pytest.fixture
def makeModel(search, config, staticBody):
    '''Factory: boundary model initialized from the given positions.'''

    def _make(positions, modelConfig=None, body=None):
        positions = np.asarray(positions, dtype=float)
        model = BoundaryModelAkinci2012(search, modelConfig or config)
        model.initModel(body or staticBody, len(positions), positions)
        return model

    return _make


@pytest.fixture
def gridPositions():
    '''3 x 3 planar grid with spacing SPACING in the z = 0 plane.'''
    return samplePlane(
        origin=np.zeros(3),
        uAxis=np.array([1.0, 0.0, 0.0]),
        vAxis=np.array([0.0, 1.0, 0.0]),
        nU=3,
        nV=3,
        spacing=SPACING,
    )


@pytest.fixture
def linePositions():
    '''Six particles with position(i) = (i, 0, 0).'''
    return np.column_stack([np.arange(6.0), np.zeros(6), np.zeros(6)])
