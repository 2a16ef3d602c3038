# -- Boundary Volume Tests -- #

'''Tests for the Akinci 2012 boundary volume estimate.'''

import numpy as np
import pytest

from boundaryCoupling.sph.boundaryModel import BoundaryModelAkinci2012
from boundaryCoupling.sph.kernels import CubicSplineKernel
from boundaryCoupling.sph.volumeEstimator import computeBoundaryVolumes

SPACING = 0.1


class OverflowingKernel(CubicSplineKernel):
    '''Kernel whose neighbor contributions are infinite.'''

    def evaluateBatch(self, distances, h):
        return np.full(len(distances), np.inf)


def bruteForceVolumes(positions, kernel, h, density0, otherPositions=None):
    '''Reference volumes from an all-pairs kernel sum including W(0).'''
    points = positions if otherPositions is None else np.vstack([positions, otherPositions])
    volumes = np.zeros(len(positions))
    for i, x in enumerate(positions):
        distances = np.linalg.norm(points - x, axis=1)
        volumes[i] = density0 / np.sum(kernel.evaluateBatch(distances, h))
    return volumes


class TestGridVolumes:
    '''3 x 3 grid with support radius twice the spacing.'''

    def test_matches_brute_force(self, makeModel, gridPositions, config):
        model = makeModel(gridPositions)
        model.computeBoundaryVolume()

        expected = bruteForceVolumes(
            gridPositions, model.kernel, config.smoothingLength, config.referenceDensity
        )
        np.testing.assert_allclose(model.volumes, expected, rtol=1e-12)

    def test_center_has_smallest_volume(self, makeModel, gridPositions):
        model = makeModel(gridPositions)
        model.computeBoundaryVolume()

        # Sample 4 is the grid center with the most neighbors
        assert np.argmin(model.volumes) == 4
        assert np.all(model.volumes > 0.0)

    def test_symmetric_corners(self, makeModel, gridPositions):
        model = makeModel(gridPositions)
        model.computeBoundaryVolume()

        corners = model.volumes[[0, 2, 6, 8]]
        np.testing.assert_allclose(corners, corners[0])

    def test_volume_scales_with_density0(self, makeModel, gridPositions):
        model = makeModel(gridPositions)
        model.computeBoundaryVolume()
        reference = model.volumes.copy()

        model.setDensity0(2.0 * model.getDensity0())
        model.computeBoundaryVolume()

        np.testing.assert_allclose(model.volumes, 2.0 * reference)

    def test_unchanged_by_resort(self, makeModel, gridPositions, search):
        model = makeModel(gridPositions)
        model.computeBoundaryVolume()
        before = dict(zip(map(tuple, model.positions), model.volumes))

        permutation = np.array([8, 3, 5, 0, 1, 7, 2, 6, 4])
        search.pointSet(model.getPointSetIndex()).setSortTable(permutation)
        model.performNeighborhoodSearchSort()
        model.computeBoundaryVolume()

        for x, volume in zip(map(tuple, model.positions), model.volumes):
            assert volume == pytest.approx(before[x], rel=1e-12)


class TestDegenerateVolumes:
    '''Particles without any boundary neighbor get zero volume.'''

    def test_isolated_particle(self, makeModel):
        model = makeModel(np.zeros((1, 3)))
        model.computeBoundaryVolume()
        assert model.getVolume(0) == 0.0

    def test_far_apart_particles(self, makeModel):
        positions = np.array([[0.0, 0.0, 0.0], [10.0, 0.0, 0.0], [0.0, 0.0, 0.05]])
        model = makeModel(positions)
        model.computeBoundaryVolume()

        assert model.getVolume(1) == 0.0
        assert model.getVolume(0) > 0.0
        assert model.getVolume(2) > 0.0

    def test_degenerate_particles_logged(self, makeModel, caplog):
        model = makeModel(np.array([[0.0, 0.0, 0.0], [5.0, 5.0, 5.0]]))
        with caplog.at_level('WARNING', logger='boundaryCoupling'):
            model.computeBoundaryVolume()
        assert 'no neighbors' in caplog.text

    def test_non_finite_sum_gives_zero(self):
        kernel = OverflowingKernel()
        positions = np.array([[0.0, 0.0, 0.0], [np.nan, 0.0, 0.0]])
        groups = [(np.array([0]), np.array([1]), positions)]

        volumes = computeBoundaryVolumes(positions, groups, kernel, SPACING, 1000.0)

        assert volumes[0] == 0.0
        assert volumes[1] == 0.0

    def test_empty_model(self, search, config, staticBody):
        model = BoundaryModelAkinci2012(search, config)
        model.initModel(staticBody, 0, np.zeros((0, 3)))
        model.computeBoundaryVolume()
        assert model.volumes.shape == (0,)

    def test_requires_init(self, search, config):
        model = BoundaryModelAkinci2012(search, config)
        with pytest.raises(RuntimeError):
            model.computeBoundaryVolume()


class TestMultipleModels:
    '''Boundary models sharing a neighborhood search contribute to each other's sums.'''

    def test_other_model_reduces_volume(self, makeModel, gridPositions, config):
        model = makeModel(gridPositions)
        otherPositions = gridPositions + np.array([0.0, 0.0, SPACING])
        other = makeModel(otherPositions)

        model.computeBoundaryVolume(otherModels=())
        alone = model.volumes.copy()
        model.computeBoundaryVolume(otherModels=[other])

        assert np.all(model.volumes < alone)
        expected = bruteForceVolumes(
            gridPositions, model.kernel, config.smoothingLength,
            config.referenceDensity, otherPositions,
        )
        np.testing.assert_allclose(model.volumes, expected, rtol=1e-12)

    def test_shared_search_models_included_by_default(self, makeModel, gridPositions, config):
        model = makeModel(gridPositions)
        otherPositions = gridPositions + np.array([0.0, 0.0, SPACING])
        other = makeModel(otherPositions)

        model.computeBoundaryVolume()

        assert model.boundaryNeighbors() == [other]
        expected = bruteForceVolumes(
            gridPositions, model.kernel, config.smoothingLength,
            config.referenceDensity, otherPositions,
        )
        np.testing.assert_allclose(model.volumes, expected, rtol=1e-12)

    def test_empty_sequence_restricts_to_own_particles(self, makeModel, gridPositions, config):
        model = makeModel(gridPositions)
        makeModel(gridPositions + np.array([0.0, 0.0, SPACING]))

        model.computeBoundaryVolume(otherModels=())

        expected = bruteForceVolumes(
            gridPositions, model.kernel, config.smoothingLength, config.referenceDensity
        )
        np.testing.assert_allclose(model.volumes, expected, rtol=1e-12)

    def test_non_boundary_point_sets_ignored(self, makeModel, gridPositions, config, search):
        model = makeModel(gridPositions)
        search.addPointSet(gridPositions + np.array([0.0, 0.0, SPACING]), user='fluid')

        model.computeBoundaryVolume()

        assert model.boundaryNeighbors() == []
        expected = bruteForceVolumes(
            gridPositions, model.kernel, config.smoothingLength, config.referenceDensity
        )
        np.testing.assert_allclose(model.volumes, expected, rtol=1e-12)
