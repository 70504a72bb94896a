"""
Data loading components: dataset tables and query results to the database,
query results to CSV.
"""
import logging
import os
import traceback
import pandas as pd
from db.models import Base, LOAD_ORDER, TABLE_COLUMNS, COLUMN_DTYPES
from transformation.calculations import to_clock_time

logger = logging.getLogger(__name__)

BATCH_SIZE = 1000
RESULT_TABLE_PREFIX = 'result_'


def _to_python(value, dtype):
    """Convert one pandas cell to the Python type the DB driver expects."""
    if dtype == 'timedelta64[ns]':
        return to_clock_time(value)
    if value is None or pd.isna(value):
        return None
    if dtype == 'datetime64[ns]':
        return value.date()
    if dtype == 'Int64':
        return int(value)
    if dtype == 'float64':
        return float(value)
    return value


def _to_db_records(table, df):
    dtypes = COLUMN_DTYPES[table]
    columns = TABLE_COLUMNS[table]
    return [
        {col: _to_python(value, dtypes[col]) for col, value in zip(columns, row)}
        for row in df[columns].itertuples(index=False, name=None)
    ]


def write_dataset(engine, dataset):
    """
    Insert every table of the dataset into the database, parents first.

    Runs in one transaction: either all tables are written or none.
    """
    try:
        logger.info("Writing dataset tables to the database")
        with engine.begin() as conn:
            for table in LOAD_ORDER:
                records = _to_db_records(table, dataset.table(table))
                if not records:
                    logger.warning(f"No data to load for table {table}")
                    continue

                insert = Base.metadata.tables[table].insert()
                for i in range(0, len(records), BATCH_SIZE):
                    batch = records[i:i + BATCH_SIZE]
                    conn.execute(insert, batch)
                    if len(records) > BATCH_SIZE:
                        logger.info(f"Inserted batch {i // BATCH_SIZE + 1} ({len(batch)} rows) into {table}")

                logger.info(f"Successfully loaded {len(records)} rows to {table}")
    except Exception as e:
        logger.error(f"Error writing dataset: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def write_query_results(engine, results):
    """
    Replace one result_<query> table per query result.

    Returns the list of table names written.
    """
    written = []
    try:
        for name, df in results.items():
            table_name = f"{RESULT_TABLE_PREFIX}{name}"
            df.to_sql(table_name, engine, if_exists='replace', index=False)
            written.append(table_name)
            logger.info(f"Wrote {len(df)} rows to {table_name}")
        return written
    except Exception as e:
        logger.error(f"Error writing query results: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def export_results_to_csv(results, output_dir):
    """
    Export query results to CSV files, one per query.
    """
    try:
        # Create output directory if it doesn't exist
        if not os.path.exists(output_dir):
            os.makedirs(output_dir)

        exported_files = {}

        for name, df in results.items():
            if df is not None and len(df) > 0:
                file_path = os.path.join(output_dir, f"{name}.csv")
                df.to_csv(file_path, index=False)
                exported_files[name] = file_path
                logger.info(f"Exported {len(df)} rows to {file_path}")
            else:
                logger.warning(f"No rows to export for {name}")

        return exported_files
    except Exception as e:
        logger.error(f"Error exporting results to CSV: {str(e)}")
        logger.error(traceback.format_exc())
        raise
