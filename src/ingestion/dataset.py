"""
In-memory dataset handle for the food delivery tables.
"""
import logging
import pandas as pd
from db.models import LOAD_ORDER, TABLE_COLUMNS, PRIMARY_KEYS, COLUMN_DTYPES
from errors import MissingReferenceData

logger = logging.getLogger(__name__)


def empty_table(name):
    """Empty DataFrame with the columns and dtypes of a dataset table."""
    dtypes = COLUMN_DTYPES[name]
    return pd.DataFrame({column: pd.Series(dtype=dtypes[column]) for column in TABLE_COLUMNS[name]})


class DeliveryDataset:
    """
    The five delivery tables held as DataFrames.

    Every query takes the dataset as its first argument; there is no module
    level connection or table state. Queries only read through table(),
    which hands out copies, so one dataset can serve several queries at once
    once loading and cleaning are done.
    """

    def __init__(self):
        self._tables = {name: empty_table(name) for name in LOAD_ORDER}

    def _check_name(self, name):
        if name not in self._tables:
            raise ValueError(f"Unknown table: {name}")

    def table(self, name):
        """Copy of one table."""
        self._check_name(name)
        return self._tables[name].copy()

    def ids(self, name):
        """Primary key values currently loaded for a table."""
        self._check_name(name)
        key = PRIMARY_KEYS[name][0]
        return set(self._tables[name][key].dropna().tolist())

    def row_counts(self):
        return {name: len(df) for name, df in self._tables.items()}

    def require(self, *names):
        """Raise MissingReferenceData if any of the named tables is empty."""
        for name in names:
            self._check_name(name)
        empty = [name for name in names if self._tables[name].empty]
        if empty:
            logger.error(f"Missing reference data in {empty}")
            raise MissingReferenceData(empty)

    def append(self, name, frame):
        """Append already validated rows to a table."""
        self._check_name(name)
        frame = frame[TABLE_COLUMNS[name]].astype(COLUMN_DTYPES[name])
        if self._tables[name].empty:
            self._tables[name] = frame.reset_index(drop=True)
        else:
            self._tables[name] = pd.concat([self._tables[name], frame], ignore_index=True)

    def replace_table(self, name, frame):
        """Swap a table for a rewritten copy; used by cleaning passes."""
        self._check_name(name)
        self._tables[name] = frame[TABLE_COLUMNS[name]].astype(COLUMN_DTYPES[name]).reset_index(drop=True)
