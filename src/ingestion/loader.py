"""
Data ingestion components for the food delivery dataset.
"""
import logging
import traceback
from collections.abc import Mapping
import pandas as pd
from db.models import (
    LOAD_ORDER,
    TABLE_COLUMNS,
    PRIMARY_KEYS,
    FOREIGN_KEYS,
    REQUIRED_FIELDS,
    NON_NULLABLE,
    DEFAULTS,
    COLUMN_DTYPES
)
from errors import ConstraintViolation, ReferentialViolation
from ingestion.dataset import DeliveryDataset, empty_table
from transformation.calculations import parse_time_of_day

logger = logging.getLogger(__name__)


def _to_frame(table, rows):
    """
    Build a DataFrame from a DataFrame or an iterable of mappings, rejecting
    records that leave out a required field.

    Column defaults fill only fields a record leaves out; an explicit null
    stays null.
    """
    required = REQUIRED_FIELDS[table]
    defaults = DEFAULTS.get(table, {})

    if isinstance(rows, pd.DataFrame):
        frame = rows.rename(columns=lambda x: x.strip() if isinstance(x, str) else x)
        missing = [field for field in required if field not in frame.columns]
        if missing:
            raise ConstraintViolation(table, f"missing required field(s) {missing}")
        frame = frame.copy()
        for col, value in defaults.items():
            if col not in frame.columns:
                frame[col] = value
        return frame

    records = []
    for position, record in enumerate(rows):
        if not isinstance(record, Mapping):
            raise ConstraintViolation(table, f"record {position} is not a mapping")
        record = {key.strip() if isinstance(key, str) else key: value for key, value in record.items()}
        missing = [field for field in required if field not in record]
        if missing:
            raise ConstraintViolation(table, f"record {position} is missing required field(s) {missing}")
        for col, value in defaults.items():
            record.setdefault(col, value)
        records.append(record)

    return pd.DataFrame.from_records(records)


def _coerce_column(series, dtype):
    if dtype == 'Int64':
        numbers = pd.to_numeric(series, errors='raise')
        return numbers.astype('Int64')
    if dtype == 'float64':
        return pd.to_numeric(series, errors='raise').astype(float).round(2)
    if dtype == 'datetime64[ns]':
        return pd.to_datetime(series, errors='raise').dt.normalize().astype('datetime64[ns]')
    if dtype == 'timedelta64[ns]':
        # an all-null column would otherwise come back as datetime64
        offsets = [parse_time_of_day(value) for value in series]
        return pd.Series(offsets, index=series.index, dtype='timedelta64[ns]')
    return series.astype(object).where(series.notna(), None)


def prepare_records(table, rows):
    """
    Validate raw rows for one table and convert them to the dataset dtypes.

    Checks that do not depend on rows already loaded happen here: required
    fields, null keys, malformed values, negative amounts and duplicates
    within the batch.
    """
    if table not in TABLE_COLUMNS:
        raise ValueError(f"Unknown table: {table}")

    frame = _to_frame(table, rows)
    if frame.empty:
        return empty_table(table)
    columns = TABLE_COLUMNS[table]

    unknown = [col for col in frame.columns if col not in columns]
    if unknown:
        logger.warning(f"Ignoring unknown columns for '{table}': {unknown}")

    for col in columns:
        if col not in frame.columns:
            frame[col] = None

    frame = frame[columns].reset_index(drop=True)

    dtypes = COLUMN_DTYPES[table]
    for col in columns:
        try:
            frame[col] = _coerce_column(frame[col], dtypes[col])
        except (ValueError, TypeError) as e:
            raise ConstraintViolation(table, f"malformed value in column '{col}': {e}")

    not_null = set(NON_NULLABLE[table]) | set(PRIMARY_KEYS[table])
    for col in columns:
        if col in not_null:
            null_count = int(frame[col].isna().sum())
            if null_count:
                raise ConstraintViolation(table, f"{null_count} null value(s) in required column '{col}'")

    if 'total_amount' in frame.columns:
        negative = frame['total_amount'] < 0
        if negative.any():
            raise ConstraintViolation(table, f"{int(negative.sum())} negative total_amount value(s)")

    pk = PRIMARY_KEYS[table]
    duplicates = frame[frame.duplicated(subset=pk, keep=False)]
    if not duplicates.empty:
        raise ConstraintViolation(
            table, f"duplicate primary key(s) {duplicates[pk[0]].unique().tolist()[:10]}"
        )

    if table == 'deliveries':
        repeated = frame[frame.duplicated(subset=['order_id'], keep=False)]
        if not repeated.empty:
            raise ConstraintViolation(
                table, f"more than one delivery for order(s) {repeated['order_id'].unique().tolist()[:10]}"
            )

    return frame


def load_records(dataset, table, rows):
    """
    Validate rows and append them to one table of the dataset.

    The batch is all-or-nothing. Raises ConstraintViolation for missing or
    malformed fields and key clashes, ReferentialViolation when a referenced
    parent id is not loaded yet. Returns the number of rows appended.
    """
    frame = prepare_records(table, rows)
    if frame.empty:
        logger.info(f"No rows to load into '{table}'")
        return 0

    pk = PRIMARY_KEYS[table][0]
    clashes = set(frame[pk].tolist()) & dataset.ids(table)
    if clashes:
        raise ConstraintViolation(table, f"primary key(s) already loaded: {sorted(clashes)[:10]}")

    if table == 'deliveries':
        delivered = set(dataset.table('deliveries')['order_id'].dropna().tolist())
        repeated = set(frame['order_id'].tolist()) & delivered
        if repeated:
            raise ConstraintViolation(table, f"order(s) already have a delivery: {sorted(repeated)[:10]}")

    for fk in FOREIGN_KEYS:
        if fk['table'] != table:
            continue
        referenced = set(frame[fk['key']].dropna().tolist())
        orphaned = referenced - dataset.ids(fk['ref_table'])
        if orphaned:
            logger.error(
                f"Referential integrity issue: {len(orphaned)} values in "
                f"{fk['table']}.{fk['key']} have no matching {fk['ref_table']}.{fk['ref_key']}"
            )
            raise ReferentialViolation(table, fk['key'], fk['ref_table'], orphaned)

    dataset.append(table, frame)
    logger.info(f"Loaded {len(frame)} rows into '{table}'")
    return len(frame)


def load_dataset(sources):
    """
    Build a dataset from a mapping of table name -> rows.

    Tables are consumed parents first (customers, restaurants, riders, then
    orders, then deliveries) whatever order the mapping has.
    """
    unknown = set(sources) - set(LOAD_ORDER)
    if unknown:
        raise ValueError(f"Unknown table(s): {sorted(unknown)}")

    dataset = DeliveryDataset()
    for table in LOAD_ORDER:
        if table in sources:
            load_records(dataset, table, sources[table])
    return dataset


def read_dataset(engine):
    """
    Read the five tables from the database into a validated dataset.
    """
    try:
        logger.info("Reading dataset tables from the database")
        dataset = DeliveryDataset()
        for table in LOAD_ORDER:
            frame = pd.read_sql_table(table, engine)
            logger.info(f"Read {len(frame)} rows from {table}")
            load_records(dataset, table, frame)
        return dataset
    except Exception as e:
        logger.error(f"Failed to read dataset: {str(e)}")
        logger.error(traceback.format_exc())
        raise
