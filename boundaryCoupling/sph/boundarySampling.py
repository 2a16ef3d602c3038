# -- Rigid Surface Sampling -- #

'''
Boundary particle sampling of simple rigid shapes.

Produces body-frame sample positions for the boundary model: regular
grids on planar patches and layered samplings of axis-aligned boxes
(container walls). Layers extend outward from the
box so the fluid side of every wall sees a full kernel support of
boundary particles when nLayers * spacing >= support radius.

Coordinate convention:
    x: Length
    y: Width
    z: Height (vertical, gravity in -z)

References:
-----------
Akinci et al. (2012) -- Versatile rigid-fluid coupling for
    incompressible SPH (single-layer surface sampling)

Sean Bowman [02/06/2026]
'''

from __future__ import annotations

import numpy as np

from boundaryCoupling import constants as const


def samplePlane(
    origin: np.ndarray,
    uAxis: np.ndarray,
    vAxis: np.ndarray,
    nU: int,
    nV: int,
    spacing: float,
) -> np.ndarray:
    '''
    Regular nU x nV grid on the plane through origin spanned by u, v.

    Parameters:
    -----------
    origin : np.ndarray
        Position of sample (0, 0) [m], shape (3,)
    uAxis : np.ndarray
        First in-plane direction (normalized internally), shape (3,)
    vAxis : np.ndarray
        Second in-plane direction (normalized internally), shape (3,)
    nU : int
        Number of samples along u
    nV : int
        Number of samples along v
    spacing : float
        Distance between neighboring samples [m]

    Returns:
    --------
    np.ndarray : Sample positions, shape (nU * nV, 3), u varying fastest
    '''
    if nU < 0 or nV < 0:
        raise ValueError(f'Sample counts must be non-negative, got ({nU}, {nV})')

    u = np.asarray(uAxis, dtype=float)
    v = np.asarray(vAxis, dtype=float)
    u = u / np.linalg.norm(u)
    v = v / np.linalg.norm(v)

    uu, vv = np.meshgrid(np.arange(nU) * spacing, np.arange(nV) * spacing, indexing='xy')
    return (
        np.asarray(origin, dtype=float)
        + uu.ravel()[:, np.newaxis] * u
        + vv.ravel()[:, np.newaxis] * v
    )


def sampleBox(
    boxMin: np.ndarray,
    boxMax: np.ndarray,
    spacing: float,
    nLayers: int = const.defaultBoundaryLayers,
    openTop: bool = False,
) -> np.ndarray:
    '''
    Layered sampling of the walls of an axis-aligned box.

    Creates layers on the floor (z = zMin), left/right walls (x),
    front/back walls (y) and, unless openTop, the lid (z = zMax).
    Layer k sits at offset (k + 1/2) * spacing outside the box face.
    Floor and lid cover the extended xy range so corners are closed;
    front/back walls only cover the interior x range to avoid
    overlapping the left/right walls.

    Parameters:
    -----------
    boxMin : np.ndarray
        Lower corner of the box interior [m], shape (3,)
    boxMax : np.ndarray
        Upper corner of the box interior [m], shape (3,)
    spacing : float
        Inter-particle spacing [m]
    nLayers : int
        Number of particle layers per wall
    openTop : bool
        If True, no particles on the lid

    Returns:
    --------
    np.ndarray : Sample positions, shape (M, 3)
    '''
    if spacing <= 0.0:
        raise ValueError(f'spacing must be positive, got {spacing}')
    if nLayers < 1:
        raise ValueError(f'nLayers must be at least 1, got {nLayers}')

    s = spacing
    xMin, yMin, zMin = np.asarray(boxMin, dtype=float)
    xMax, yMax, zMax = np.asarray(boxMax, dtype=float)

    allPositions: list[np.ndarray] = []

    # Extended domain for corners (layers extend outward)
    xCoordsExt = np.arange(xMin - nLayers * s + s / 2.0, xMax + nLayers * s, s)
    yCoordsExt = np.arange(yMin - nLayers * s + s / 2.0, yMax + nLayers * s, s)
    xCoords = np.arange(xMin + s / 2.0, xMax, s)
    zCoords = np.arange(zMin + s / 2.0, zMax, s)

    for layer in range(nLayers):
        offset = (layer + 0.5) * s

        # Floor and lid, xy plane over the extended range
        xx, yy = np.meshgrid(xCoordsExt, yCoordsExt, indexing='xy')
        allPositions.append(_stack(xx, yy, np.full_like(xx, zMin - offset)))
        if not openTop:
            allPositions.append(_stack(xx, yy, np.full_like(xx, zMax + offset)))

        # Left / right walls, yz plane
        yyWall, zzWall = np.meshgrid(yCoordsExt, zCoords, indexing='xy')
        allPositions.append(_stack(np.full_like(yyWall, xMin - offset), yyWall, zzWall))
        allPositions.append(_stack(np.full_like(yyWall, xMax + offset), yyWall, zzWall))

        # Front / back walls, xz plane, interior x only
        xxWall, zzFront = np.meshgrid(xCoords, zCoords, indexing='xy')
        allPositions.append(_stack(xxWall, np.full_like(xxWall, yMin - offset), zzFront))
        allPositions.append(_stack(xxWall, np.full_like(xxWall, yMax + offset), zzFront))

    return np.vstack(allPositions)


def _stack(x: np.ndarray, y: np.ndarray, z: np.ndarray) -> np.ndarray:
    return np.column_stack([x.ravel(), y.ravel(), z.ravel()])
