# -- boundaryCoupling Package -- #

'''
Rigid-fluid boundary coupling for SPH after Akinci et al. (2012).

Boundary particle storage with a generic field registry, the Akinci
boundary volume estimate, neighbor-search resort synchronization and
binary state persistence, plus the strong-coupling extension fields
of Gissler et al. (2019).

Sean Bowman [02/05/2026]
'''

__version__ = '0.1.0'

from boundaryCoupling.sph.boundaryModel import BoundaryModelAkinci2012
from boundaryCoupling.sph.protocols import BoundaryConfig
from boundaryCoupling.sph.neighborSearch import NeighborhoodSearch
from boundaryCoupling.sph.rigidBody import RigidBody
