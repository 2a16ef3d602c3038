# -- SPH Boundary Package -- #

'''
Boundary particle model and its SPH collaborators.

Provides kernels, the point-set neighborhood search, the field
registry, the resort synchronizer, the boundary volume estimator and
the Akinci 2012 boundary model itself.

Sean Bowman [02/05/2026]
'''

from boundaryCoupling.sph.protocols import BoundaryConfig, RigidBodyObject
from boundaryCoupling.sph.kernels import CubicSplineKernel, WendlandC2Kernel, createKernel
from boundaryCoupling.sph.fieldRegistry import FieldDescription, FieldRegistry, FieldType
from boundaryCoupling.sph.neighborSearch import NeighborhoodSearch, PointSet
from boundaryCoupling.sph.boundaryModel import BoundaryModelAkinci2012
