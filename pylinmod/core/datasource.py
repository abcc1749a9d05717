"""
Observation table for PyLinMod.

DataSource is the "I have data" abstraction: named, equal-length
columns. It does not know which column is the outcome or how a column
will be encoded; model terms decide that when the design matrix is
built.

Numeric columns are stored as float64. Anything else (strings,
booleans, mixed objects) is stored untouched so it can feed a
categorical term.

Usage:
    from pylinmod import DataSource

    ds = DataSource.from_arrays(bmi=bmi, age=age, sex=sex)
    ds = DataSource.from_dataframe(df)
    ds = DataSource.from_file("nhanes.csv")

    ds.keys()        # frozenset({'bmi', 'age', 'sex'})
    ds['age']        # float64 array
    ds.take([0, 2])  # new DataSource with rows 0 and 2
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylinmod.core.exceptions import ValidationError, DimensionError

if TYPE_CHECKING:
    import pandas as pd


def _as_column(name: str, values: ArrayLike) -> NDArray:
    """Store numeric data as float64, everything else as-is."""
    arr = np.asarray(values)
    if arr.ndim == 2 and arr.shape[1] == 1:
        arr = arr.ravel()
    if arr.ndim != 1:
        raise DimensionError(
            f"column '{name}': expected 1D array, got {arr.ndim}D with shape {arr.shape}"
        )
    if arr.dtype != np.bool_ and np.issubdtype(arr.dtype, np.number):
        return arr.astype(np.float64)
    return arr


@dataclass(frozen=True)
class DataSource:
    """
    Column-oriented observation table. Immutable.

    Construct via the factory classmethods, not directly.
    """
    _data: dict[str, NDArray]
    _metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        lengths = {name: arr.shape[0] for name, arr in self._data.items()}
        if len(set(lengths.values())) > 1:
            details = ", ".join(f"{k}={v}" for k, v in lengths.items())
            raise DimensionError(f"Inconsistent column lengths: {details}")

    # === Array Access ===

    def keys(self) -> frozenset[str]:
        """Names of all columns."""
        return frozenset(self._data.keys())

    @property
    def columns(self) -> tuple[str, ...]:
        """Column names in insertion order."""
        return tuple(self._data.keys())

    def __getitem__(self, key: str) -> NDArray:
        if key not in self._data:
            raise KeyError(
                f"DataSource has no column '{key}'. Available: {sorted(self.keys())}"
            )
        return self._data[key]

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return self.n_observations

    # === Properties ===

    @property
    def n_observations(self) -> int:
        """Number of rows."""
        if not self._data:
            return 0
        return next(iter(self._data.values())).shape[0]

    @property
    def metadata(self) -> dict[str, Any]:
        return self._metadata.copy()

    # === Row selection ===

    def take(self, indices: ArrayLike) -> DataSource:
        """
        Return a new DataSource holding the given rows, in the given order.

        Args:
            indices: Integer row positions

        Raises:
            ValidationError: If indices are not integers or out of range
        """
        idx = np.asarray(indices)
        if idx.ndim != 1 or (idx.size > 0 and not np.issubdtype(idx.dtype, np.integer)):
            raise ValidationError("indices: expected a 1D array of integer row positions")
        n = self.n_observations
        if idx.size > 0 and (idx.min() < -n or idx.max() >= n):
            raise ValidationError(
                f"indices: out of range for table with {n} rows"
            )
        data = {name: arr[idx] for name, arr in self._data.items()}
        metadata = {**self._metadata, 'parent_rows': n}
        return DataSource(_data=data, _metadata=metadata)

    # === Factory Methods ===

    @classmethod
    def from_arrays(cls, **columns: ArrayLike) -> DataSource:
        """Construct from named 1D arrays."""
        if not columns:
            raise ValidationError("DataSource requires at least one column")
        storage = {name: _as_column(name, values) for name, values in columns.items()}
        return cls(_data=storage, _metadata={'source': 'arrays'})

    @classmethod
    def from_dataframe(cls, df: 'pd.DataFrame', *, source_path: str | None = None) -> DataSource:
        """
        Construct from a pandas DataFrame.

        Numeric columns become float64. Object, string, boolean and
        pandas categorical columns keep their labels.
        """
        import pandas as pd

        storage: dict[str, NDArray] = {}
        for col in df.columns:
            series = df[col]
            if isinstance(series.dtype, pd.CategoricalDtype):
                values = series.astype(object).to_numpy()
            else:
                values = series.to_numpy()
            storage[str(col)] = _as_column(str(col), values)

        metadata: dict[str, Any] = {'source': 'dataframe'}
        if source_path:
            metadata['source_path'] = source_path
        return cls(_data=storage, _metadata=metadata)

    @classmethod
    def from_file(cls, path: str | Path, *, columns: list[str] | None = None) -> DataSource:
        """
        Construct from a file.

        CSV/TSV are read with pandas (``columns`` restricts which are
        loaded). NPY files hold a 2D numeric array and need ``columns``
        to name its columns.
        """
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix in ('.csv', '.tsv'):
            import pandas as pd
            sep = '\t' if suffix == '.tsv' else ','
            df = pd.read_csv(path, sep=sep, usecols=columns)
            return cls.from_dataframe(df, source_path=str(path))
        elif suffix == '.npy':
            data = np.load(path)
            if data.ndim != 2:
                raise DimensionError(
                    f"{path.name}: expected 2D array, got {data.ndim}D"
                )
            if columns is None or len(columns) != data.shape[1]:
                raise ValidationError(
                    f"{path.name}: columns must name all {data.shape[1]} array columns"
                )
            ds = cls.from_arrays(**{name: data[:, i] for i, name in enumerate(columns)})
            return cls(_data=ds._data, _metadata={'source': 'npy', 'source_path': str(path)})
        else:
            raise ValidationError(f"Unknown file format: {suffix}")


def as_datasource(table: Any) -> DataSource:
    """
    Accept a DataSource, a mapping of column arrays, or a pandas DataFrame.

    Raises:
        ValidationError: For anything else
    """
    if isinstance(table, DataSource):
        return table
    if isinstance(table, Mapping):
        return DataSource.from_arrays(**table)
    if hasattr(table, 'columns') and hasattr(table, 'to_numpy'):
        return DataSource.from_dataframe(table)
    raise ValidationError(
        f"table: expected DataSource, mapping or DataFrame, got {type(table).__name__}"
    )
