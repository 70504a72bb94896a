"""
Name -> function mapping for the analytical queries, and a runner.
"""
import logging
import time
import traceback
from analysis.customers import (
    top_dishes_for_customer,
    frequent_customer_order_value,
    high_value_customers,
    churned_customers,
    customer_segments,
    customer_lifetime_value
)
from analysis.restaurants import (
    undelivered_orders_by_restaurant,
    restaurant_revenue_rank_by_city,
    cancellation_rate_comparison,
    restaurant_monthly_growth,
    peak_day_by_restaurant
)
from analysis.riders import (
    rider_average_delivery_time,
    rider_monthly_earnings,
    rider_ratings,
    rider_efficiency
)
from analysis.sales import (
    popular_time_slots,
    most_popular_dish_by_city,
    monthly_sales_trend,
    seasonal_item_demand,
    city_revenue_rank
)

logger = logging.getLogger(__name__)

QUERIES = {
    'top_dishes_for_customer': top_dishes_for_customer,
    'popular_time_slots': popular_time_slots,
    'frequent_customer_order_value': frequent_customer_order_value,
    'high_value_customers': high_value_customers,
    'undelivered_orders_by_restaurant': undelivered_orders_by_restaurant,
    'restaurant_revenue_rank_by_city': restaurant_revenue_rank_by_city,
    'most_popular_dish_by_city': most_popular_dish_by_city,
    'churned_customers': churned_customers,
    'cancellation_rate_comparison': cancellation_rate_comparison,
    'rider_average_delivery_time': rider_average_delivery_time,
    'restaurant_monthly_growth': restaurant_monthly_growth,
    'customer_segments': customer_segments,
    'rider_monthly_earnings': rider_monthly_earnings,
    'rider_ratings': rider_ratings,
    'peak_day_by_restaurant': peak_day_by_restaurant,
    'customer_lifetime_value': customer_lifetime_value,
    'monthly_sales_trend': monthly_sales_trend,
    'rider_efficiency': rider_efficiency,
    'seasonal_item_demand': seasonal_item_demand,
    'city_revenue_rank': city_revenue_rank
}

# Queries that look back one year from a reference date
DATED_QUERIES = {'top_dishes_for_customer', 'restaurant_revenue_rank_by_city'}


def run_queries(dataset, names=None, as_of=None):
    """
    Run the named queries (all of them by default) against the dataset.

    Returns a dict of query name -> result DataFrame, in the order asked for.
    Unknown names raise KeyError before anything runs; a failing query is
    logged and its error re-raised.
    """
    if names is None:
        names = list(QUERIES)

    unknown = [name for name in names if name not in QUERIES]
    if unknown:
        raise KeyError(f"Unknown queries: {unknown}")

    results = {}
    for name in names:
        start = time.time()
        try:
            logger.info(f"Running query '{name}'")
            if name in DATED_QUERIES:
                results[name] = QUERIES[name](dataset, as_of=as_of)
            else:
                results[name] = QUERIES[name](dataset)
            logger.info(f"Query '{name}' returned {len(results[name])} rows in {time.time() - start:.2f}s")
        except Exception as e:
            logger.error(f"Query '{name}' failed: {str(e)}")
            logger.error(traceback.format_exc())
            raise

    return results
