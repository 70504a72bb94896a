"""
Data joining operations shared by the analytical queries.
"""
import logging
import pandas as pd
from transformation.calculations import elapsed_minutes

logger = logging.getLogger(__name__)

DELIVERED = 'Delivered'


def orders_with_customers(dataset):
    """Orders joined to the customer who placed them."""
    dataset.require('orders', 'customers')
    return pd.merge(
        dataset.table('orders'),
        dataset.table('customers'),
        on='customer_id',
        how='inner'
    )


def orders_with_restaurants(dataset):
    """Orders joined to the restaurant that fulfilled them."""
    dataset.require('orders', 'restaurants')
    return pd.merge(
        dataset.table('orders'),
        dataset.table('restaurants'),
        on='restaurant_id',
        how='inner'
    )


def orders_with_delivery_flag(dataset):
    """
    Every order with its delivery_id (if any) and a has_delivery flag.
    """
    dataset.require('orders', 'deliveries')
    flagged = pd.merge(
        dataset.table('orders'),
        dataset.table('deliveries')[['order_id', 'delivery_id']],
        on='order_id',
        how='left'
    )
    flagged['has_delivery'] = flagged['delivery_id'].notna()
    return flagged


def orders_without_delivery(dataset):
    """
    Orders that have no delivery row at all.
    """
    flagged = orders_with_delivery_flag(dataset)
    missing = flagged[~flagged['has_delivery']].drop(columns=['delivery_id', 'has_delivery'])

    if len(missing) > 0:
        logger.info(f"Found {len(missing)} orders with no delivery record")

    return missing.reset_index(drop=True)


def delivered_orders(dataset):
    """
    Orders whose delivery status is Delivered, joined to their delivery.

    Pending or missing deliveries are left out entirely.
    """
    dataset.require('orders', 'deliveries')
    deliveries = dataset.table('deliveries')
    deliveries = deliveries[deliveries['delivery_status'] == DELIVERED]

    delivered = pd.merge(
        dataset.table('orders'),
        deliveries,
        on='order_id',
        how='inner'
    )
    return delivered.reset_index(drop=True)


def delivery_durations(dataset):
    """
    Delivered orders with the minutes each delivery took.
    """
    delivered = delivered_orders(dataset)

    no_time = delivered['order_time'].isna() | delivered['delivery_time'].isna()
    if no_time.any():
        logger.warning(f"Skipping {int(no_time.sum())} delivered orders with no order or delivery time")
        delivered = delivered[~no_time]

    delivered = delivered.reset_index(drop=True)
    delivered['delivery_minutes'] = elapsed_minutes(delivered['order_time'], delivered['delivery_time'])
    return delivered
