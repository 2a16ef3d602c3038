# -- Constants for Akinci 2012 Boundary Handling -- #

'''
Physical and numerical defaults for rigid-fluid boundary coupling.
All values in SI units unless otherwise noted.

References:
-----------
Akinci et al. (2012) -- Versatile rigid-fluid coupling for
    incompressible SPH
Gissler et al. (2019) -- Interlinked SPH pressure solvers for strong
    fluid-rigid coupling

Sean Bowman [02/05/2026]
'''

#--------------------------------------------------------------------#
# -- Fluid Properties -- #
#--------------------------------------------------------------------#

# Reference fluid density (freshwater at 20C) [kg/m^3]
referenceDensity: float = 1000.0

#--------------------------------------------------------------------#
# -- Sampling and Kernel Parameters -- #
#--------------------------------------------------------------------#

# Boundary particle radius [m]
# Sampling spacing is 2 * particleRadius
defaultParticleRadius: float = 0.025

# Smoothing length to particle spacing ratio
# h = smoothingLengthRatio * particleSpacing, support radius = 2h
# A ratio of 1.0 gives the usual support radius of 4 * particleRadius
defaultSmoothingLengthRatio: float = 1.0

# Default kernel used for the boundary volume estimate
defaultKernelType: str = 'cubicSpline'

# Number of boundary sampling layers
defaultBoundaryLayers: int = 1

#--------------------------------------------------------------------#
# -- Numerical Guards -- #
#--------------------------------------------------------------------#

# Kernel sums at or below this value are treated as degenerate
# and produce a zero boundary volume
volumeSumEpsilon: float = 1.0e-12
