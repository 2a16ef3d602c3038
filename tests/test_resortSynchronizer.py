# -- Resort Synchronizer Tests -- #

'''Tests for applying neighbor-search permutations to the boundary arrays.'''

import numpy as np
import pytest

from boundaryCoupling.errors import ResortError
from boundaryCoupling.sph.fieldRegistry import FieldDescription, FieldRegistry, FieldType
from boundaryCoupling.sph.neighborSearch import NeighborhoodSearch, PointSet, mortonCodes
from boundaryCoupling.sph.resortSynchronizer import ResortSynchronizer


PERMUTATION = np.array([3, 0, 5, 1, 4, 2])


def pointSetOf(model, search):
    return search.pointSet(model.getPointSetIndex())


class TestPerformSort:
    '''performNeighborhoodSearchSort on a boundary model.'''

    def test_positions_follow_permutation(self, makeModel, linePositions, search):
        model = makeModel(linePositions)
        pointSetOf(model, search).setSortTable(PERMUTATION)

        model.performNeighborhoodSearchSort()

        np.testing.assert_array_equal(model.positions[:, 0], PERMUTATION)
        assert model.isSorted()

    def test_all_owned_arrays_sorted_together(self, makeModel, linePositions, search):
        model = makeModel(linePositions)
        for i in range(6):
            model.setVelocity(i, [10.0 * i, 0.0, 0.0])
            model.setVolume(i, 100.0 * i)

        pointSetOf(model, search).setSortTable(PERMUTATION)
        model.performNeighborhoodSearchSort()

        np.testing.assert_array_equal(model.restPositions[:, 0], PERMUTATION)
        np.testing.assert_array_equal(model.velocities[:, 0], 10.0 * PERMUTATION)
        np.testing.assert_array_equal(model.volumes, 100.0 * PERMUTATION)

    def test_arrays_keep_identity(self, makeModel, linePositions, search):
        model = makeModel(linePositions)
        positions = model.positions
        pointSetOf(model, search).setSortTable(PERMUTATION)

        model.performNeighborhoodSearchSort()

        assert model.positions is positions
        assert pointSetOf(model, search).positions is positions

    def test_second_call_is_noop(self, makeModel, linePositions, search):
        model = makeModel(linePositions)
        pointSetOf(model, search).setSortTable(PERMUTATION)

        model.performNeighborhoodSearchSort()
        once = model.positions.copy()
        model.performNeighborhoodSearchSort()

        np.testing.assert_array_equal(model.positions, once)

    def test_new_epoch_applies_again(self, makeModel, linePositions, search):
        model = makeModel(linePositions)
        pointSet = pointSetOf(model, search)

        pointSet.setSortTable(PERMUTATION)
        model.performNeighborhoodSearchSort()
        pointSet.setSortTable(PERMUTATION)
        model.performNeighborhoodSearchSort()

        np.testing.assert_array_equal(model.positions[:, 0], PERMUTATION[PERMUTATION])
        assert model.sortEpoch == pointSet.sortEpoch == 2

    def test_without_permutation_is_noop(self, makeModel, linePositions):
        model = makeModel(linePositions)
        model.performNeighborhoodSearchSort()
        np.testing.assert_array_equal(model.positions, linePositions)
        assert not model.isSorted()

    def test_extension_field_sorted(self, makeModel, linePositions, search):
        model = makeModel(linePositions)
        labels = np.arange(6, dtype=np.uint32)
        model.addField(FieldDescription('label', FieldType.UINT, array=labels))

        pointSetOf(model, search).setSortTable(PERMUTATION)
        model.performNeighborhoodSearchSort()

        np.testing.assert_array_equal(labels, PERMUTATION)

    def test_accessor_field_not_sorted(self, makeModel, linePositions, search):
        values = list(range(6))
        model = makeModel(linePositions)
        model.addField(FieldDescription('acc', FieldType.SCALAR, getter=lambda i: values[i]))

        pointSetOf(model, search).setSortTable(PERMUTATION)
        model.performNeighborhoodSearchSort()

        assert values == list(range(6))

    def test_strong_coupling_arrays_sorted(self, makeModel, linePositions, search, strongConfig):
        model = makeModel(linePositions, modelConfig=strongConfig)
        for i in range(6):
            model.setPressure(i, float(i))
            model.setV_rr(i, [0.0, float(i), 0.0])

        pointSetOf(model, search).setSortTable(PERMUTATION)
        model.performNeighborhoodSearchSort()

        np.testing.assert_array_equal(model.strongCoupling.pressure, PERMUTATION)
        np.testing.assert_array_equal(model.strongCoupling.v_rr[:, 1], PERMUTATION)

    def test_length_mismatch_modifies_nothing(self, makeModel, linePositions, search):
        model = makeModel(linePositions)
        model.addField(FieldDescription('short', FieldType.SCALAR, array=np.zeros(4)))
        pointSetOf(model, search).setSortTable(PERMUTATION)

        with pytest.raises(ResortError):
            model.performNeighborhoodSearchSort()

        np.testing.assert_array_equal(model.positions, linePositions)
        assert not model.isSorted()

    def test_resize_discards_pending_permutation(self, makeModel, linePositions, search):
        model = makeModel(linePositions)
        pointSetOf(model, search).setSortTable(PERMUTATION)

        model.resize(6)
        model.performNeighborhoodSearchSort()

        np.testing.assert_array_equal(model.positions, linePositions)
        assert pointSetOf(model, search).sortTable is None

    def test_z_sort_orders_dynamic_model(self, makeModel, dynamicBody, search):
        rng = np.random.default_rng(7)
        positions = rng.uniform(0.0, 1.0, size=(50, 3))
        model = makeModel(positions, body=dynamicBody)

        search.zSort()
        model.performNeighborhoodSearchSort()

        assert model.isSorted()
        cells = np.floor(model.positions / search.radius).astype(np.int64)
        codes = mortonCodes(cells)
        assert np.all(codes[1:] >= codes[:-1])
        np.testing.assert_array_equal(
            np.sort(model.positions, axis=0), np.sort(positions, axis=0)
        )

    def test_z_sort_skips_static_model(self, makeModel, gridPositions, search):
        model = makeModel(gridPositions)
        search.zSort()
        model.performNeighborhoodSearchSort()
        assert not model.isSorted()


class TestResortSynchronizer:
    '''Synchronizer used directly on a point set.'''

    def test_duplicate_references_sorted_once(self):
        pointSet = PointSet(np.zeros((3, 3)))
        data = np.array([0.0, 1.0, 2.0])
        registry = FieldRegistry()
        registry.addField(FieldDescription('a', FieldType.SCALAR, array=data))
        synchronizer = ResortSynchronizer()
        synchronizer.register('data', lambda: data)

        pointSet.setSortTable(np.array([2, 0, 1]))
        assert synchronizer.apply(pointSet, 3, registry)

        np.testing.assert_array_equal(data, [2.0, 0.0, 1.0])

    def test_overlapping_views_rejected(self):
        pointSet = PointSet(np.zeros((3, 3)))
        base = np.zeros((3, 2))
        synchronizer = ResortSynchronizer()
        synchronizer.register('first', lambda: base[:, 0])
        synchronizer.register('whole', lambda: base)

        pointSet.setSortTable(np.array([2, 0, 1]))
        with pytest.raises(ResortError):
            synchronizer.apply(pointSet, 3)

    def test_unallocated_array_skipped(self):
        pointSet = PointSet(np.zeros((2, 3)))
        synchronizer = ResortSynchronizer()
        synchronizer.register('missing', lambda: None)

        pointSet.setSortTable(np.array([1, 0]))
        assert synchronizer.apply(pointSet, 2)
        assert not synchronizer.isPending(pointSet)

    def test_unregister(self):
        pointSet = PointSet(np.zeros((2, 3)))
        data = np.array([1.0, 2.0])
        synchronizer = ResortSynchronizer()
        synchronizer.register('data', lambda: data)
        synchronizer.unregister('data')

        pointSet.setSortTable(np.array([1, 0]))
        synchronizer.apply(pointSet, 2)

        np.testing.assert_array_equal(data, [1.0, 2.0])


class TestSortTable:
    '''Validation of permutations installed on a point set.'''

    @pytest.mark.parametrize('table', [
        np.array([0, 1]),
        np.array([0, 0, 1]),
        np.array([0.0, 1.0, 2.0]),
        np.array([0, 1, 3]),
    ])
    def test_invalid_tables_rejected(self, table):
        pointSet = PointSet(np.zeros((3, 3)))
        with pytest.raises(ResortError):
            pointSet.setSortTable(table)
        assert pointSet.sortEpoch == 0

    def test_sort_field_without_table_is_noop(self):
        pointSet = PointSet(np.zeros((3, 3)))
        data = np.array([3.0, 2.0, 1.0])
        pointSet.sortField(data)
        np.testing.assert_array_equal(data, [3.0, 2.0, 1.0])

    def test_z_sort_disabled(self):
        search = NeighborhoodSearch(1.0, zSortEnabled=False)
        index = search.addPointSet(np.random.default_rng(0).uniform(size=(10, 3)))
        search.zSort()
        assert search.pointSet(index).sortTable is None
