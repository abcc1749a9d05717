"""
Tests for DataSource.

Validates:
    - Column storage (numeric -> float64, labels untouched)
    - Access, containment and length
    - take() row selection
    - Factory methods: arrays, DataFrame, CSV and NPY files
    - as_datasource() coercion
"""

import numpy as np
import pytest

from pylinmod.core.datasource import DataSource, as_datasource
from pylinmod.core.exceptions import DimensionError, ValidationError


class TestFromArrays:

    def test_numeric_stored_as_float64(self):
        ds = DataSource.from_arrays(x=[1, 2, 3])
        assert ds['x'].dtype == np.float64

    def test_labels_kept(self):
        ds = DataSource.from_arrays(g=['a', 'b', 'a'])
        assert list(ds['g']) == ['a', 'b', 'a']

    def test_bool_kept_as_bool(self):
        ds = DataSource.from_arrays(flag=[True, False, True])
        assert ds['flag'].dtype == np.bool_

    def test_column_vector_flattened(self):
        ds = DataSource.from_arrays(x=np.ones((4, 1)))
        assert ds['x'].shape == (4,)

    def test_2d_column_rejected(self):
        with pytest.raises(DimensionError, match="column 'x'"):
            DataSource.from_arrays(x=np.ones((4, 2)))

    def test_inconsistent_lengths(self):
        with pytest.raises(DimensionError, match="Inconsistent column lengths"):
            DataSource.from_arrays(x=[1.0, 2.0], y=[1.0, 2.0, 3.0])

    def test_no_columns(self):
        with pytest.raises(ValidationError, match="at least one column"):
            DataSource.from_arrays()

    def test_metadata_source(self):
        ds = DataSource.from_arrays(x=[1.0])
        assert ds.metadata == {'source': 'arrays'}


class TestAccess:

    @pytest.fixture
    def ds(self):
        return DataSource.from_arrays(x=[1.0, 2.0, 3.0], g=['a', 'b', 'c'])

    def test_keys(self, ds):
        assert ds.keys() == frozenset({'x', 'g'})

    def test_columns_ordered(self, ds):
        assert ds.columns == ('x', 'g')

    def test_contains(self, ds):
        assert 'x' in ds
        assert 'z' not in ds

    def test_len_and_n_observations(self, ds):
        assert len(ds) == 3
        assert ds.n_observations == 3

    def test_missing_column(self, ds):
        with pytest.raises(KeyError, match="no column 'z'"):
            ds['z']

    def test_metadata_is_copy(self, ds):
        md = ds.metadata
        md['source'] = 'tampered'
        assert ds.metadata['source'] == 'arrays'


class TestTake:

    @pytest.fixture
    def ds(self):
        return DataSource.from_arrays(x=[10.0, 20.0, 30.0, 40.0], g=['a', 'b', 'c', 'd'])

    def test_rows_in_given_order(self, ds):
        sub = ds.take([3, 0])
        np.testing.assert_array_equal(sub['x'], [40.0, 10.0])
        assert list(sub['g']) == ['d', 'a']
        assert sub.n_observations == 2

    def test_parent_rows_recorded(self, ds):
        assert ds.take(np.array([1, 2])).metadata['parent_rows'] == 4

    def test_original_untouched(self, ds):
        ds.take([0])
        assert ds.n_observations == 4

    def test_out_of_range(self, ds):
        with pytest.raises(ValidationError, match="out of range"):
            ds.take([4])

    def test_non_integer(self, ds):
        with pytest.raises(ValidationError, match="integer row positions"):
            ds.take([0.5, 1.0])


class TestFromDataFrame:

    def test_mixed_columns(self):
        pd = pytest.importorskip("pandas")
        df = pd.DataFrame({
            'x': [1, 2, 3],
            'g': pd.Categorical(['lo', 'hi', 'lo']),
            's': ['u', 'v', 'w'],
        })
        ds = DataSource.from_dataframe(df)
        assert ds['x'].dtype == np.float64
        assert list(ds['g']) == ['lo', 'hi', 'lo']
        assert list(ds['s']) == ['u', 'v', 'w']
        assert ds.metadata['source'] == 'dataframe'


class TestFromFile:

    def test_csv(self, tmp_path):
        pd = pytest.importorskip("pandas")
        path = tmp_path / "data.csv"
        pd.DataFrame({'x': [1.0, 2.0], 'g': ['a', 'b']}).to_csv(path, index=False)
        ds = DataSource.from_file(path)
        np.testing.assert_array_equal(ds['x'], [1.0, 2.0])
        assert ds.metadata['source_path'] == str(path)

    def test_tsv_with_column_subset(self, tmp_path):
        pd = pytest.importorskip("pandas")
        path = tmp_path / "data.tsv"
        pd.DataFrame({'x': [1.0, 2.0], 'y': [3.0, 4.0]}).to_csv(path, sep='\t', index=False)
        ds = DataSource.from_file(path, columns=['y'])
        assert ds.keys() == frozenset({'y'})

    def test_npy(self, tmp_path):
        path = tmp_path / "data.npy"
        np.save(path, np.arange(6.0).reshape(3, 2))
        ds = DataSource.from_file(path, columns=['a', 'b'])
        np.testing.assert_array_equal(ds['b'], [1.0, 3.0, 5.0])
        assert ds.metadata['source'] == 'npy'

    def test_npy_needs_column_names(self, tmp_path):
        path = tmp_path / "data.npy"
        np.save(path, np.zeros((3, 2)))
        with pytest.raises(ValidationError, match="columns must name"):
            DataSource.from_file(path)

    def test_unknown_format(self, tmp_path):
        with pytest.raises(ValidationError, match="Unknown file format"):
            DataSource.from_file(tmp_path / "data.parquet")


class TestAsDataSource:

    def test_passthrough(self):
        ds = DataSource.from_arrays(x=[1.0])
        assert as_datasource(ds) is ds

    def test_mapping(self):
        ds = as_datasource({'x': [1.0, 2.0]})
        assert ds.n_observations == 2

    def test_dataframe(self):
        pd = pytest.importorskip("pandas")
        ds = as_datasource(pd.DataFrame({'x': [1.0, 2.0]}))
        assert ds.metadata['source'] == 'dataframe'

    def test_rejects_other(self):
        with pytest.raises(ValidationError, match="expected DataSource"):
            as_datasource([1.0, 2.0])
