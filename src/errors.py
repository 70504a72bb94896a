"""
Exceptions raised while loading and querying the food delivery dataset.
"""


class DataModelError(Exception):
    """Base class for dataset errors."""


class ConstraintViolation(DataModelError):
    """A record is missing a required field or carries a malformed value."""

    def __init__(self, table, message):
        self.table = table
        super().__init__(f"{table}: {message}")


class ReferentialViolation(DataModelError):
    """A record references a parent row that does not exist."""

    def __init__(self, table, key, ref_table, missing):
        self.table = table
        self.key = key
        self.ref_table = ref_table
        self.missing = sorted(missing)
        super().__init__(
            f"{table}.{key} references missing {ref_table} rows: {self.missing[:10]}"
        )


class MissingReferenceData(DataModelError):
    """A query needs a table that has no rows."""

    def __init__(self, tables):
        self.tables = list(tables)
        super().__init__(f"No data loaded for table(s): {', '.join(self.tables)}")
