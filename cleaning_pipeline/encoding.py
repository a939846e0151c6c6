"""
Categorical Encoding
====================
Turns categorical columns into numbers: one indicator column per
category (one-hot) or a single integer code per category (label).
"""

import logging

import pandas as pd

from cleaning_pipeline.columns import resolve_columns, to_python
from cleaning_pipeline.exceptions import ConfigurationError
from cleaning_pipeline.report import StageResult

logger = logging.getLogger(__name__)

CATEGORY = "Encoding"

# Code assigned to missing values by label encoding
MISSING_CODE = -1


def one_hot_encode(
    df: pd.DataFrame,
    columns: str | list[str],
    drop_first: bool = False,
    dummy_na: bool = False,
) -> tuple[pd.DataFrame, StageResult]:
    """
    Replace each column with 0/1 indicator columns named ``<column>_<value>``.

    Columns must be named explicitly. Indicator columns take the position of
    the column they replace.
    """
    if columns is None:
        raise ConfigurationError("one_hot_encode needs explicit 'columns'")
    stage = "one_hot_encode"
    cols = resolve_columns(df, columns, stage, kinds=("categorical",))
    out = df.copy()

    created: dict[str, list[str]] = {}
    values = 0
    for col in cols:
        dummies = pd.get_dummies(
            out[col],
            prefix=str(col),
            drop_first=drop_first,
            dummy_na=dummy_na,
            dtype=int,
        )
        clashes = [name for name in dummies.columns if name in out.columns and name != col]
        if clashes:
            raise ConfigurationError(
                f"one_hot_encode: indicator column(s) {clashes} for '{col}' already exist"
            )
        position = out.columns.get_loc(col)
        out = out.drop(columns=[col])
        for offset, name in enumerate(dummies.columns):
            out.insert(position + offset, name, dummies[name])
        created[col] = [str(name) for name in dummies.columns]
        values += int(out.shape[0])

    new_columns = sum(len(names) for names in created.values())
    action = f"One-hot encoded {len(created)} column(s) into {new_columns} indicator column(s)"
    logger.info("%s", action)
    return out, StageResult(
        stage=stage,
        category=CATEGORY,
        action=action,
        rows_affected=len(out) if created else 0,
        values_affected=values,
        summary=created,
    )


def label_encode(
    df: pd.DataFrame,
    columns: str | list[str] | None = None,
    categories: dict[str, list] | None = None,
) -> tuple[pd.DataFrame, StageResult]:
    """
    Replace each category with an integer code.

    Codes follow sorted category order unless ``categories`` gives an
    explicit order for a column. Missing values, and values absent from an
    explicit order, get code -1.
    """
    stage = "label_encode"
    categories = categories or {}
    cols = resolve_columns(df, columns, stage, kinds=("categorical",))
    unknown = set(categories) - set(cols)
    if unknown:
        raise ConfigurationError(
            f"label_encode categories given for columns not being encoded: {sorted(map(str, unknown))}"
        )
    out = df.copy()

    mappings: dict[str, dict] = {}
    values = 0
    for col in cols:
        order = categories.get(col)
        if order is None:
            order = sorted(out[col].dropna().unique(), key=str)
        codes = pd.Categorical(out[col], categories=order).codes
        out[col] = pd.Series(codes, index=out.index, dtype="int64")
        mappings[col] = {to_python(cat): code for code, cat in enumerate(order)}
        values += int((codes != MISSING_CODE).sum())

    action = f"Label encoded {len(mappings)} column(s)"
    logger.info("%s", action)
    return out, StageResult(
        stage=stage,
        category=CATEGORY,
        action=action,
        rows_affected=len(out) if mappings else 0,
        values_affected=values,
        summary=mappings,
    )
