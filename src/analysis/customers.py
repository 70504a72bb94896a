"""
Customer analytics: favourite dishes, order value, spend, churn, segments, CLV.
"""
import logging
import numpy as np
from transformation.calculations import assign_rank, one_year_before
from transformation.joins import orders_with_customers

logger = logging.getLogger(__name__)

DEFAULT_CUSTOMER = 'Arjun Mehta'
FREQUENT_ORDER_COUNT = 750
HIGH_VALUE_SPEND = 100000
CHURN_YEARS = (2023, 2024)

GOLD = 'Gold'
SILVER = 'Silver'


def top_dishes_for_customer(dataset, customer_name=DEFAULT_CUSTOMER, as_of=None, top_n=5):
    """
    Most frequently ordered dishes of one customer over the last year.

    Dense rank on order count, so tied dishes share a rank and the next
    count takes the following rank. Keeps ranks up to top_n.
    """
    logger.info(f"Finding top {top_n} dishes for customer '{customer_name}'")

    orders = orders_with_customers(dataset)
    since = one_year_before(as_of)
    recent = orders[(orders['customer_name'] == customer_name) & (orders['order_date'] >= since)]

    dishes = recent.groupby(
        ['customer_id', 'customer_name', 'order_item'], dropna=False
    ).size().reset_index(name='total_orders')
    dishes = dishes.rename(columns={'order_item': 'dish'})

    dishes = assign_rank(dishes, 'total_orders', method='dense')
    dishes = dishes[dishes['rank'] <= top_n].sort_values(['rank', 'dish'])

    return dishes[['customer_name', 'dish', 'total_orders', 'rank']].reset_index(drop=True)


def frequent_customer_order_value(dataset):
    """
    Average order value of customers with more than 750 orders.
    """
    logger.info("Calculating average order value for frequent customers")

    orders = orders_with_customers(dataset)
    stats = orders.groupby(['customer_id', 'customer_name'], dropna=False).agg(
        total_orders=('order_id', 'count'),
        aov=('total_amount', 'mean')
    ).reset_index()

    stats = stats[stats['total_orders'] > FREQUENT_ORDER_COUNT].copy()
    stats['aov'] = stats['aov'].round(2)

    logger.info(f"Found {len(stats)} customers with more than {FREQUENT_ORDER_COUNT} orders")
    return stats.sort_values('aov', ascending=False).reset_index(drop=True)


def high_value_customers(dataset):
    """
    Customers whose total spend is above 100,000.
    """
    logger.info("Identifying high-value customers")

    orders = orders_with_customers(dataset)
    spend = orders.groupby(['customer_id', 'customer_name'], dropna=False).agg(
        total_spent=('total_amount', 'sum')
    ).reset_index()

    spend = spend[spend['total_spent'] > HIGH_VALUE_SPEND].copy()
    spend['total_spent'] = spend['total_spent'].round(2)

    return spend.sort_values('total_spent', ascending=False).reset_index(drop=True)


def _customers_ordering_in(orders, year):
    return set(orders.loc[orders['order_date'].dt.year == year, 'customer_id'].dropna().tolist())


def _customer_rows(dataset, customer_ids):
    customers = dataset.table('customers')
    selected = customers[customers['customer_id'].isin(sorted(customer_ids))]
    return selected[['customer_id', 'customer_name']].sort_values('customer_id').reset_index(drop=True)


def churned_customers(dataset):
    """
    Customers with an order in 2023 and none in 2024.
    """
    dataset.require('orders', 'customers')
    base_year, following_year = CHURN_YEARS
    logger.info(f"Finding customers who ordered in {base_year} but not in {following_year}")

    orders = dataset.table('orders')
    churned = _customers_ordering_in(orders, base_year) - _customers_ordering_in(orders, following_year)

    logger.info(f"Found {len(churned)} churned customers")
    return _customer_rows(dataset, churned)


def retained_customers(dataset):
    """
    Customers with orders in both 2023 and 2024.
    """
    dataset.require('orders', 'customers')
    base_year, following_year = CHURN_YEARS

    orders = dataset.table('orders')
    retained = _customers_ordering_in(orders, base_year) & _customers_ordering_in(orders, following_year)
    return _customer_rows(dataset, retained)


def classify_customers(dataset):
    """
    Gold/Silver segment for every customer with at least one order.

    A customer is Gold when their lifetime spend exceeds the platform-wide
    average order value (mean over orders, not over customers).
    """
    dataset.require('orders')

    orders = dataset.table('orders')
    average_order_value = orders['total_amount'].mean()

    per_customer = orders.groupby('customer_id').agg(
        total_orders=('order_id', 'count'),
        total_spent=('total_amount', 'sum')
    ).reset_index()
    per_customer['segment'] = np.where(
        per_customer['total_spent'] > average_order_value, GOLD, SILVER
    )
    return per_customer


def customer_segments(dataset):
    """
    Order count and revenue for the Gold and Silver segments.
    """
    logger.info("Segmenting customers into Gold and Silver")

    per_customer = classify_customers(dataset)
    segments = per_customer.groupby('segment').agg(
        customers=('customer_id', 'count'),
        total_orders=('total_orders', 'sum'),
        total_revenue=('total_spent', 'sum')
    ).reset_index()
    segments['total_revenue'] = segments['total_revenue'].round(2)

    return segments.sort_values('segment').reset_index(drop=True)


def customer_lifetime_value(dataset):
    """
    Total revenue from each customer over all their orders.
    """
    logger.info("Calculating customer lifetime value")

    orders = orders_with_customers(dataset)
    clv = orders.groupby(['customer_id', 'customer_name'], dropna=False).agg(
        clv=('total_amount', 'sum')
    ).reset_index()
    clv['clv'] = clv['clv'].round(2)

    return clv.sort_values(['clv', 'customer_id'], ascending=[False, True]).reset_index(drop=True)
