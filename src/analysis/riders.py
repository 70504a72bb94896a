"""
Rider analytics built on delivered orders.

Only deliveries with status Delivered count here. Pending deliveries and
orders with no delivery row are excluded, never treated as zero minutes.
"""
import logging
import pandas as pd
from transformation.calculations import month_label, star_rating
from transformation.joins import delivered_orders, delivery_durations

logger = logging.getLogger(__name__)

RIDER_COMMISSION = 0.08

FASTEST = 'fastest'
SLOWEST = 'slowest'


def _with_rider_names(df, dataset):
    riders = dataset.table('riders')[['rider_id', 'rider_name']]
    return pd.merge(df, riders, on='rider_id', how='left')


def rider_average_delivery_time(dataset):
    """
    Average minutes from order to delivery for each rider.
    """
    logger.info("Calculating average delivery time per rider")
    dataset.require('riders')

    durations = delivery_durations(dataset)
    averages = durations.groupby('rider_id').agg(
        delivered_orders=('order_id', 'count'),
        avg_delivery_minutes=('delivery_minutes', 'mean')
    ).reset_index()
    averages['avg_delivery_minutes'] = averages['avg_delivery_minutes'].round(2)

    averages = _with_rider_names(averages, dataset)
    averages = averages.sort_values('rider_id')

    return averages[['rider_id', 'rider_name', 'delivered_orders', 'avg_delivery_minutes']].reset_index(drop=True)


def rider_monthly_earnings(dataset):
    """
    Rider earnings per month: 8% of the amounts of the orders they delivered.
    """
    logger.info("Calculating monthly rider earnings")

    delivered = delivered_orders(dataset)
    delivered['month'] = month_label(delivered['order_date'])

    earnings = delivered.groupby(['rider_id', 'month']).agg(
        revenue=('total_amount', 'sum')
    ).reset_index()
    earnings['earnings'] = (earnings['revenue'] * RIDER_COMMISSION).round(2)
    earnings['revenue'] = earnings['revenue'].round(2)

    return earnings.sort_values(['rider_id', 'month']).reset_index(drop=True)


def rider_ratings(dataset):
    """
    Count of 5, 4 and 3 star deliveries for each rider.

    Under 15 minutes is 5 stars, 15 to 20 minutes inclusive is 4 stars and
    anything longer is 3 stars.
    """
    logger.info("Rating riders by delivery time")

    durations = delivery_durations(dataset)
    durations['stars'] = durations['delivery_minutes'].map(star_rating)

    ratings = durations.groupby(['rider_id', 'stars']).agg(
        total_ratings=('order_id', 'count')
    ).reset_index()

    ratings = ratings.sort_values(
        ['rider_id', 'total_ratings', 'stars'], ascending=[True, False, True]
    )
    return ratings.reset_index(drop=True)


def rider_efficiency(dataset):
    """
    Riders with the lowest and the highest average delivery time.
    """
    logger.info("Evaluating rider efficiency")
    columns = ['efficiency', 'rider_id', 'rider_name', 'avg_delivery_minutes']

    averages = rider_average_delivery_time(dataset)
    if averages.empty:
        return pd.DataFrame(columns=columns)

    minutes = averages['avg_delivery_minutes']
    fastest = averages[minutes == minutes.min()].assign(efficiency=FASTEST)
    slowest = averages[minutes == minutes.max()].assign(efficiency=SLOWEST)

    return pd.concat([fastest, slowest], ignore_index=True)[columns]
