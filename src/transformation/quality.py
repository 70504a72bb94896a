"""
Data quality report for the food delivery dataset.

The loader already rejects records that break the schema, so what is left to
report here are the gaps the queries work around: null amounts before the
cleaning pass, delivered rows with no delivery time, and orders that never
got a delivery row. Checks never modify the data.

Every check returns {label: {'count': n, 'examples': [...]}} holding only
the labels with something to report; examples are primary key values.
"""
import logging
import traceback
from db.models import LOAD_ORDER, PRIMARY_KEYS, FOREIGN_KEYS
from transformation.joins import DELIVERED

logger = logging.getLogger(__name__)

EXAMPLE_LIMIT = 10

# Reported but not counted as issues
INFORMATIONAL = ('undelivered_orders',)

VALUE_RULES = {
    ('orders', 'total_amount'): lambda x: x.isna() | (x >= 0),
    ('orders', 'order_status'): lambda x: x.notna(),
    ('deliveries', 'delivery_status'): lambda x: x.notna(),
}


def _finding(values):
    values = list(values)
    return {'count': len(values), 'examples': values[:EXAMPLE_LIMIT]}


def _keys(df, table, mask):
    return df.loc[mask, PRIMARY_KEYS[table][0]].tolist()


def run_data_quality_checks(dataset):
    """
    Run every check against the loaded tables and log a summary.
    """
    try:
        logger.info("Running data quality checks")
        tables = {name: dataset.table(name) for name in LOAD_ORDER}

        report = {
            'missing_values': check_missing_values(tables),
            'duplicate_keys': check_duplicate_keys(tables),
            'invalid_values': check_value_ranges(tables),
            'orphaned_keys': check_referential_integrity(tables),
            'untimed_deliveries': check_untimed_deliveries(tables),
            'undelivered_orders': check_undelivered_orders(tables),
        }

        total_issues = count_issues(report)
        if total_issues > 0:
            logger.warning(f"Data quality report: {total_issues} issue(s) found")
        else:
            logger.info("Data quality report: no issues")

        return report
    except Exception as e:
        logger.error(f"Data quality checks failed: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def count_issues(report):
    total = 0
    for check, findings in report.items():
        if check in INFORMATIONAL:
            continue
        total += sum(finding['count'] for finding in findings.values())
    return total


def check_missing_values(tables):
    """Null cells per column."""
    findings = {}

    for table, df in tables.items():
        for column in df.columns:
            missing = df[column].isna()
            if missing.any():
                label = f"{table}.{column}"
                findings[label] = _finding(_keys(df, table, missing))
                logger.warning(f"{label}: {findings[label]['count']} missing value(s)")

    return findings


def check_duplicate_keys(tables):
    """
    Rows sharing a primary key.

    The loader rejects these, so on a loaded dataset this only fires for
    tables swapped in through replace_table, which skips validation.
    """
    findings = {}

    for table, df in tables.items():
        key = PRIMARY_KEYS[table][0]
        repeated = df.loc[df.duplicated(subset=[key], keep=False), key]
        if not repeated.empty:
            label = f"{table}.{key}"
            findings[label] = _finding(repeated.unique().tolist())
            logger.warning(f"{label}: {len(repeated)} rows share a primary key")

    return findings


def check_value_ranges(tables):
    """Values that break a column rule (negative amounts, null statuses)."""
    findings = {}

    for (table, column), rule in VALUE_RULES.items():
        df = tables[table]
        invalid = ~rule(df[column])
        if invalid.any():
            label = f"{table}.{column}"
            findings[label] = _finding(_keys(df, table, invalid))
            logger.warning(f"{label}: {findings[label]['count']} invalid value(s)")

    return findings


def check_referential_integrity(tables):
    findings = {}

    for fk in FOREIGN_KEYS:
        child = tables[fk['table']]
        parent_ids = set(tables[fk['ref_table']][fk['ref_key']].dropna().tolist())
        orphaned = set(child[fk['key']].dropna().tolist()) - parent_ids

        if orphaned:
            label = f"{fk['table']}.{fk['key']} -> {fk['ref_table']}.{fk['ref_key']}"
            findings[label] = _finding(sorted(orphaned))
            logger.warning(f"{label}: {len(orphaned)} value(s) with no parent row")

    return findings


def check_untimed_deliveries(tables):
    """Delivered rows without a delivery time; delivery-time queries skip them."""
    deliveries = tables['deliveries']
    untimed = (deliveries['delivery_status'] == DELIVERED) & deliveries['delivery_time'].isna()

    if not untimed.any():
        return {}

    logger.warning(f"{int(untimed.sum())} delivered row(s) have no delivery time")
    return {'deliveries.delivery_time': _finding(_keys(deliveries, 'deliveries', untimed))}


def check_undelivered_orders(tables):
    """
    Orders with no delivery row. Reported for information; not an error.
    """
    orders = tables['orders']
    has_delivery = orders['order_id'].isin(tables['deliveries']['order_id'].dropna())
    undelivered = sorted(_keys(orders, 'orders', ~has_delivery))

    if not undelivered:
        return {}

    logger.info(f"Found {len(undelivered)} orders with no delivery record")
    return {'orders': _finding(undelivered)}
