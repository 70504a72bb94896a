"""
Restaurant analytics: undelivered orders, revenue ranking, cancellations,
monthly growth and peak days.
"""
import logging
import pandas as pd
from transformation.calculations import (
    assign_rank,
    growth_pct,
    month_label,
    one_year_before,
    previous_value
)
from transformation.joins import (
    delivered_orders,
    orders_with_delivery_flag,
    orders_with_restaurants,
    orders_without_delivery
)

logger = logging.getLogger(__name__)

CURRENT_YEAR = 2024
PREVIOUS_YEAR = 2023


def _with_restaurant_names(df, dataset, columns=('restaurant_name',)):
    restaurants = dataset.table('restaurants')[['restaurant_id', *columns]]
    return pd.merge(df, restaurants, on='restaurant_id', how='left')


def undelivered_orders_by_restaurant(dataset):
    """
    Number of orders per restaurant that never got a delivery record.
    """
    logger.info("Counting orders without a delivery per restaurant")
    dataset.require('restaurants')

    missing = orders_without_delivery(dataset)
    counts = missing.groupby('restaurant_id').agg(
        not_delivered_orders=('order_id', 'count')
    ).reset_index()

    counts = _with_restaurant_names(counts, dataset, columns=('restaurant_name', 'city'))
    counts = counts.sort_values(['not_delivered_orders', 'restaurant_id'], ascending=[False, True])

    return counts[['restaurant_id', 'restaurant_name', 'city', 'not_delivered_orders']].reset_index(drop=True)


def restaurant_revenue_rank_by_city(dataset, as_of=None, max_rank=1):
    """
    Rank restaurants within their city by revenue over the last year.

    Competition rank: restaurants with equal revenue share a rank and the
    next one skips ahead. Keeps ranks up to max_rank (all when None).
    """
    logger.info("Ranking restaurant revenue within each city")

    orders = orders_with_restaurants(dataset)
    recent = orders[orders['order_date'] >= one_year_before(as_of)]

    revenue = recent.groupby(['city', 'restaurant_id'], dropna=False).agg(
        total_revenue=('total_amount', 'sum')
    ).reset_index()
    revenue['total_revenue'] = revenue['total_revenue'].round(2)

    revenue = assign_rank(revenue, 'total_revenue', by='city', method='min')
    if max_rank is not None:
        revenue = revenue[revenue['rank'] <= max_rank]

    revenue = _with_restaurant_names(revenue, dataset)
    revenue = revenue.sort_values(['city', 'rank', 'restaurant_id'])

    return revenue[['city', 'restaurant_name', 'total_revenue', 'rank']].reset_index(drop=True)


def cancellation_rate_comparison(dataset):
    """
    Share of orders without a delivery, per restaurant, 2024 against 2023.

    A restaurant with no orders in one of the two years gets 0 for that year.
    """
    logger.info(f"Comparing cancellation rates for {CURRENT_YEAR} and {PREVIOUS_YEAR}")
    dataset.require('restaurants')
    columns = ['restaurant_id', 'restaurant_name', 'current_year_ratio', 'previous_year_ratio']

    flagged = orders_with_delivery_flag(dataset)
    flagged['year'] = flagged['order_date'].dt.year.astype(int)
    flagged = flagged[flagged['year'].isin([CURRENT_YEAR, PREVIOUS_YEAR])].copy()
    flagged['not_delivered'] = (~flagged['has_delivery']).astype(int)

    if flagged.empty:
        return pd.DataFrame(columns=columns)

    per_year = flagged.groupby(['restaurant_id', 'year']).agg(
        total_orders=('order_id', 'count'),
        not_delivered=('not_delivered', 'sum')
    ).reset_index()
    per_year['cancel_ratio'] = (per_year['not_delivered'] / per_year['total_orders'] * 100).round(2)

    ratios = per_year.pivot(index='restaurant_id', columns='year', values='cancel_ratio')
    ratios = ratios.reindex(columns=[CURRENT_YEAR, PREVIOUS_YEAR]).fillna(0.0)
    ratios.columns = ['current_year_ratio', 'previous_year_ratio']
    ratios = ratios.reset_index()

    ratios = _with_restaurant_names(ratios, dataset)
    return ratios[columns].sort_values('restaurant_id').reset_index(drop=True)


def restaurant_monthly_growth(dataset):
    """
    Month-over-month growth in delivered orders for each restaurant.

    Months are compared with the previous month present for the restaurant;
    the first month has 0 as its previous value and no growth ratio.
    """
    logger.info("Calculating monthly delivered-order growth per restaurant")

    delivered = delivered_orders(dataset)
    delivered['month'] = month_label(delivered['order_date'])

    monthly = delivered.groupby(['restaurant_id', 'month']).agg(
        current_month_orders=('order_id', 'count')
    ).reset_index().sort_values(['restaurant_id', 'month']).reset_index(drop=True)

    monthly['previous_month_orders'] = previous_value(
        monthly['current_month_orders'], by=monthly['restaurant_id']
    ).astype(int)
    monthly['growth_ratio'] = growth_pct(monthly['current_month_orders'], monthly['previous_month_orders'])

    return monthly[[
        'restaurant_id', 'month', 'previous_month_orders', 'current_month_orders', 'growth_ratio'
    ]]


def peak_day_by_restaurant(dataset):
    """
    Weekday with the most orders for each restaurant (ties all kept).
    """
    logger.info("Finding the peak order day for each restaurant")

    orders = orders_with_restaurants(dataset)
    orders['day'] = orders['order_date'].dt.day_name()

    counts = orders.groupby(['restaurant_id', 'day']).agg(
        total_orders=('order_id', 'count')
    ).reset_index()
    counts = assign_rank(counts, 'total_orders', by='restaurant_id', method='min')
    peak = counts[counts['rank'] == 1]

    peak = _with_restaurant_names(peak, dataset)
    peak = peak.sort_values(['restaurant_id', 'day'])

    return peak[['restaurant_id', 'restaurant_name', 'day', 'total_orders', 'rank']].reset_index(drop=True)
