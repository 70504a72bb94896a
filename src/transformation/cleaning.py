"""
Data cleaning for the food delivery dataset.

The one cleaning rule: an order with no total_amount is worth zero. It runs
once after loading and before any query aggregates amounts; running it again
changes nothing because only null amounts are rewritten.
"""
import logging
import traceback
from sqlalchemy import update
from db.models import Order

logger = logging.getLogger(__name__)


def normalize_amounts(dataset):
    """
    Set every null orders.total_amount in the dataset to 0.

    Returns the number of orders rewritten.
    """
    orders = dataset.table('orders')
    missing = orders['total_amount'].isna()
    fixed = int(missing.sum())

    if fixed:
        logger.info(f"Setting {fixed} null order amounts to 0")
        orders.loc[missing, 'total_amount'] = 0.0
        dataset.replace_table('orders', orders)
    else:
        logger.info("No null order amounts found")

    return fixed


def normalize_amounts_in_db(engine):
    """
    Run the same rule as one UPDATE in a single transaction.

    Returns the number of rows the database reports as updated.
    """
    try:
        statement = (
            update(Order.__table__)
            .where(Order.__table__.c.total_amount.is_(None))
            .values(total_amount=0)
        )
        with engine.begin() as conn:
            result = conn.execute(statement)
        logger.info(f"Set {result.rowcount} null order amounts to 0 in the database")
        return result.rowcount
    except Exception as e:
        logger.error(f"Error normalizing order amounts: {str(e)}")
        logger.error(traceback.format_exc())
        raise
