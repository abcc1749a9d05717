"""
Model terms and design matrix construction.

A model is an ordered list of term descriptors rather than a formula
string:

    Intercept()                       column of ones
    Numeric('age')                    one column
    Categorical('sex')                k-1 treatment (dummy) columns
    Interaction(Numeric('age'), Categorical('sex'))
                                      elementwise products

design_matrix() turns a table and a term list into a ModelMatrix. The
ModelMatrix keeps the *resolved* terms (categorical levels and reference
frozen), so the identical encoding can be applied to new data for
prediction or cross-validation.

Categorical coding policy:
    - levels are ordered by first appearance in row order, unless given
    - the reference level is the first level, unless given
    - one indicator column per non-reference level, labelled 'name[level]'
    - a value not among the resolved levels is an error, never silently
      treated as the reference
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from itertools import product
from typing import Any, Union

import numpy as np
from numpy.typing import NDArray

from pylinmod.core.datasource import DataSource, as_datasource
from pylinmod.core.exceptions import ValidationError
from pylinmod.core.validation import check_array, check_finite, check_1d

INTERCEPT_LABEL = '(Intercept)'


@dataclass(frozen=True)
class Intercept:
    """Constant column of ones. Always placed first in the design."""

    @property
    def label(self) -> str:
        return INTERCEPT_LABEL

    @property
    def key(self) -> tuple:
        return ('intercept',)


@dataclass(frozen=True)
class Numeric:
    """A numeric table column used as-is."""
    name: str

    @property
    def label(self) -> str:
        return self.name

    @property
    def key(self) -> tuple:
        return ('variable', self.name)


@dataclass(frozen=True)
class Categorical:
    """
    A categorical table column in treatment (dummy) coding.

    Attributes:
        name: Table column
        reference: Level absorbed into the intercept. Defaults to the
            first level.
        levels: Full level order. Defaults to first-seen row order.
    """
    name: str
    reference: Any = None
    levels: tuple | None = None

    def __post_init__(self) -> None:
        if self.levels is not None:
            object.__setattr__(self, 'levels', tuple(self.levels))

    @property
    def label(self) -> str:
        return self.name

    @property
    def key(self) -> tuple:
        return ('variable', self.name)


@dataclass(frozen=True, init=False)
class Interaction:
    """
    Product of two or more terms.

    Nested interactions are flattened, so Interaction(Interaction(a, b), c)
    is the three-way interaction of a, b and c. Subterm order only affects
    column order and labels; Interaction(a, b) and Interaction(b, a) are the
    same term.
    """
    terms: tuple = field()

    def __init__(self, *terms: 'Term'):
        flat: list = []
        for term in terms:
            if isinstance(term, Interaction):
                flat.extend(term.terms)
            elif isinstance(term, (Numeric, Categorical)):
                flat.append(term)
            elif isinstance(term, Intercept):
                raise ValidationError("Interaction cannot contain the intercept")
            else:
                raise ValidationError(
                    f"Interaction subterms must be Numeric, Categorical or Interaction, "
                    f"got {type(term).__name__}"
                )
        if len(flat) < 2:
            raise ValidationError(
                f"Interaction requires at least 2 subterms, got {len(flat)}"
            )
        keys = [t.key for t in flat]
        if len(set(keys)) != len(keys):
            raise ValidationError(
                f"Interaction subterms must be distinct variables, got "
                f"{[t.label for t in flat]}"
            )
        object.__setattr__(self, 'terms', tuple(flat))

    @property
    def label(self) -> str:
        return ':'.join(t.label for t in self.terms)

    @property
    def key(self) -> tuple:
        return ('interaction', frozenset(t.key for t in self.terms))


Term = Union[Intercept, Numeric, Categorical, Interaction]


@dataclass(frozen=True)
class ModelMatrix:
    """
    Encoded design matrix with the metadata needed to reproduce it.

    Attributes:
        X: (n, p) float64 design matrix
        column_names: p column labels
        term_slices: term label -> column slice in X
        terms: resolved terms (categorical levels frozen)
        n: number of observations
        p: number of columns
    """
    X: NDArray[np.floating[Any]]
    column_names: tuple[str, ...]
    term_slices: dict[str, slice]
    terms: tuple
    n: int
    p: int

    @property
    def has_intercept(self) -> bool:
        return any(isinstance(t, Intercept) for t in self.terms)

    def transform(self, table: DataSource | Mapping) -> ModelMatrix:
        """Encode a new table with this matrix's resolved terms."""
        return design_matrix(table, self.terms)


# === Encoding ===


def _column(table: DataSource, name: str) -> NDArray:
    if name not in table:
        raise ValidationError(
            f"table has no column '{name}'. Available: {sorted(table.keys())}"
        )
    return table[name]


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and value != value)


def resolve_categorical(term: Categorical, values: NDArray) -> Categorical:
    """
    Freeze the level order and reference level of a categorical term.

    Raises:
        ValidationError: On missing values, an unknown reference level,
            or values outside explicitly supplied levels
    """
    observed = values.tolist()
    if any(_is_missing(v) for v in observed):
        raise ValidationError(f"{term.name}: categorical column contains missing values")

    if term.levels is None:
        levels = tuple(dict.fromkeys(observed))
    else:
        levels = term.levels
        if len(set(levels)) != len(levels):
            raise ValidationError(f"{term.name}: levels contain duplicates: {list(levels)}")

    if not levels:
        raise ValidationError(f"{term.name}: no levels to encode")

    reference = levels[0] if term.reference is None else term.reference
    if reference not in levels:
        raise ValidationError(
            f"{term.name}: reference level {reference!r} not among levels {list(levels)}"
        )
    return Categorical(term.name, reference=reference, levels=levels)


def encode_treatment(
    term: Categorical,
    values: NDArray,
) -> tuple[NDArray[np.floating[Any]], list[str]]:
    """
    Treatment (dummy) coding against the term's reference level.

    Args:
        term: A resolved Categorical
        values: 1D array of labels

    Returns:
        (X_coded, column_names): (n, k-1) indicator matrix and its labels
    """
    index = {level: i for i, level in enumerate(term.levels)}
    codes = np.empty(len(values), dtype=np.intp)
    for row, value in enumerate(values.tolist()):
        try:
            codes[row] = index[value]
        except (KeyError, TypeError):
            raise ValidationError(
                f"{term.name}: level {value!r} was not seen when the model was "
                f"specified (known levels: {list(term.levels)})"
            ) from None

    contrasts = [lvl for lvl in term.levels if lvl != term.reference]
    X = np.zeros((len(values), len(contrasts)), dtype=np.float64)
    for j, level in enumerate(contrasts):
        X[:, j] = (codes == index[level]).astype(np.float64)

    names = [f"{term.name}[{level}]" for level in contrasts]
    return X, names


def interaction_columns(
    blocks: list[tuple[NDArray, list[str]]],
) -> tuple[NDArray[np.floating[Any]], list[str]]:
    """
    Elementwise products of every combination of the blocks' columns.

    Blocks of widths p_1..p_m give p_1 * ... * p_m columns, ordered with
    the first block varying slowest.
    """
    n = blocks[0][0].shape[0]
    widths = [block.shape[1] for block, _ in blocks]
    X_int = np.empty((n, int(np.prod(widths))), dtype=np.float64)
    names: list[str] = []

    for col, combo in enumerate(product(*(range(w) for w in widths))):
        column = np.ones(n, dtype=np.float64)
        for (block, _), j in zip(blocks, combo):
            column = column * block[:, j]
        X_int[:, col] = column
        names.append(':'.join(labels[j] for (_, labels), j in zip(blocks, combo)))

    return X_int, names


def _resolve_categoricals(table: DataSource, terms: list[Term]) -> dict[str, Categorical]:
    """
    One resolved coding per categorical column.

    A main-effect Categorical decides the coding; otherwise the first
    occurrence inside an interaction does. A later occurrence that sets
    its own reference or levels must agree with that coding.

    Raises:
        ValidationError: On conflicting references or level orders
    """
    main_effects = [t for t in terms if isinstance(t, Categorical)]
    in_interactions = [
        sub for t in terms if isinstance(t, Interaction)
        for sub in t.terms if isinstance(sub, Categorical)
    ]

    resolved: dict[str, Categorical] = {}
    for term in main_effects + in_interactions:
        coding = resolve_categorical(term, _column(table, term.name))
        if term.name not in resolved:
            resolved[term.name] = coding
        elif (term.reference is not None or term.levels is not None) \
                and coding != resolved[term.name]:
            first = resolved[term.name]
            raise ValidationError(
                f"{term.name}: conflicting coding, reference {coding.reference!r} with "
                f"levels {list(coding.levels)} vs reference {first.reference!r} with "
                f"levels {list(first.levels)}; a categorical column has one coding "
                f"per model"
            )
    return resolved


def _encode(
    term: Term,
    table: DataSource,
    categoricals: dict[str, Categorical],
) -> tuple[Term, NDArray, list[str]]:
    """Resolve one term and return (resolved_term, columns, column_names)."""
    n = table.n_observations

    if isinstance(term, Intercept):
        return term, np.ones((n, 1), dtype=np.float64), [INTERCEPT_LABEL]

    if isinstance(term, Numeric):
        values = check_array(_column(table, term.name), term.name)
        check_1d(values, term.name)
        check_finite(values, term.name)
        return term, values.reshape(-1, 1), [term.name]

    if isinstance(term, Categorical):
        resolved = categoricals[term.name]
        X_coded, names = encode_treatment(resolved, table[term.name])
        return resolved, X_coded, names

    if isinstance(term, Interaction):
        resolved_subterms = []
        blocks = []
        for sub in term.terms:
            resolved_sub, X_sub, names_sub = _encode(sub, table, categoricals)
            resolved_subterms.append(resolved_sub)
            blocks.append((X_sub, names_sub))
        X_int, names = interaction_columns(blocks)
        return Interaction(*resolved_subterms), X_int, names

    raise ValidationError(f"Unknown term type: {type(term).__name__}")


def design_matrix(table: DataSource | Mapping, terms: list[Term] | tuple) -> ModelMatrix:
    """
    Build the design matrix for a list of model terms.

    Columns follow the order the terms were listed, except that an
    Intercept always comes first.

    Args:
        table: DataSource (or a mapping of column arrays, or a DataFrame)
        terms: Ordered term descriptors

    Returns:
        ModelMatrix with X, column labels and the resolved terms

    Raises:
        ValidationError: On an empty or duplicated term list, missing
            columns, non-numeric/non-finite numeric data, unseen
            categorical levels, or conflicting codings of one column

    Example:
        >>> mm = design_matrix(ds, [Intercept(), Numeric('age'),
        ...                         Categorical('sex'),
        ...                         Interaction(Numeric('age'), Categorical('sex'))])
        >>> mm.column_names
        ('(Intercept)', 'age', 'sex[F]', 'age:sex[F]')
    """
    table = as_datasource(table)
    terms = list(terms)
    if not terms:
        raise ValidationError("terms: at least one model term is required")
    if table.n_observations < 1:
        raise ValidationError("table: requires at least 1 observation, got 0")

    seen: dict[tuple, str] = {}
    for term in terms:
        if not isinstance(term, (Intercept, Numeric, Categorical, Interaction)):
            raise ValidationError(f"Unknown term type: {type(term).__name__}")
        if term.key in seen:
            raise ValidationError(
                f"terms: duplicate term {term.label!r} (already listed as {seen[term.key]!r})"
            )
        seen[term.key] = term.label

    ordered = [t for t in terms if isinstance(t, Intercept)]
    ordered += [t for t in terms if not isinstance(t, Intercept)]

    categoricals = _resolve_categoricals(table, ordered)

    columns: list[NDArray] = []
    column_names: list[str] = []
    term_slices: dict[str, slice] = {}
    resolved_terms: list[Term] = []
    col_offset = 0

    for term in ordered:
        resolved, X_term, names = _encode(term, table, categoricals)
        ncols = X_term.shape[1]
        columns.append(X_term)
        column_names.extend(names)
        term_slices[resolved.label] = slice(col_offset, col_offset + ncols)
        resolved_terms.append(resolved)
        col_offset += ncols

    X = np.hstack(columns)

    return ModelMatrix(
        X=X,
        column_names=tuple(column_names),
        term_slices=term_slices,
        terms=tuple(resolved_terms),
        n=table.n_observations,
        p=col_offset,
    )
