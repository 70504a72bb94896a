"""
Platform-wide sales analytics: time slots, dishes by city and season,
monthly sales trend and city revenue ranking.
"""
import logging
from transformation.calculations import (
    SLOT_HOURS,
    assign_rank,
    growth_pct,
    month_label,
    previous_value,
    season,
    time_slot,
    time_slot_label
)
from transformation.joins import orders_with_restaurants

logger = logging.getLogger(__name__)

CITY_RANK_YEAR = 2023


def popular_time_slots(dataset):
    """
    Order counts per two-hour slot of the day, busiest first.
    """
    logger.info("Counting orders per two-hour time slot")
    dataset.require('orders')

    orders = dataset.table('orders')
    timed = orders[orders['order_time'].notna()].copy()
    if len(timed) < len(orders):
        logger.warning(f"Skipping {len(orders) - len(timed)} orders with no order time")

    hours = (timed['order_time'].dt.total_seconds() // 3600).astype(int)
    timed['start_hour'] = hours.map(lambda hour: time_slot(hour)[0])

    slots = timed.groupby('start_hour').agg(
        total_orders=('order_id', 'count')
    ).reset_index()
    slots['start_hour'] = slots['start_hour'].astype(int)
    slots['end_hour'] = slots['start_hour'] + SLOT_HOURS
    slots['time_slot'] = slots['start_hour'].map(time_slot_label)

    slots = slots.sort_values(['total_orders', 'start_hour'], ascending=[False, True])
    return slots[['time_slot', 'start_hour', 'end_hour', 'total_orders']].reset_index(drop=True)


def most_popular_dish_by_city(dataset):
    """
    Dish with the most orders in each city (ties all kept).
    """
    logger.info("Finding the most popular dish in each city")

    orders = orders_with_restaurants(dataset)
    dishes = orders.groupby(['city', 'order_item'], dropna=False).agg(
        total_orders=('order_id', 'count')
    ).reset_index().rename(columns={'order_item': 'dish'})

    dishes = assign_rank(dishes, 'total_orders', by='city', method='min')
    dishes = dishes[dishes['rank'] == 1].sort_values(['city', 'dish'])

    return dishes[['city', 'dish', 'total_orders', 'rank']].reset_index(drop=True)


def monthly_sales_trend(dataset):
    """
    Total sales per month next to the previous month's sales.

    The first month's previous value is 0 and its growth is undefined (NaN).
    """
    logger.info("Calculating monthly sales trend")
    dataset.require('orders')

    orders = dataset.table('orders')
    orders['month'] = month_label(orders['order_date'])

    monthly = orders.groupby('month').agg(
        total_sale=('total_amount', 'sum')
    ).reset_index().sort_values('month').reset_index(drop=True)
    monthly['total_sale'] = monthly['total_sale'].round(2)
    monthly['previous_month_sale'] = previous_value(monthly['total_sale'])
    monthly['growth_pct'] = growth_pct(monthly['total_sale'], monthly['previous_month_sale'])

    return monthly[['month', 'total_sale', 'previous_month_sale', 'growth_pct']]


def seasonal_item_demand(dataset):
    """
    Orders per item and season, to spot seasonal demand spikes.
    """
    logger.info("Calculating seasonal demand per item")
    dataset.require('orders')

    orders = dataset.table('orders')
    orders['season'] = orders['order_date'].dt.month.map(season)

    demand = orders.groupby(['order_item', 'season'], dropna=False).agg(
        total_orders=('order_id', 'count')
    ).reset_index()

    demand = demand.sort_values(
        ['order_item', 'total_orders', 'season'], ascending=[True, False, True]
    )
    return demand.reset_index(drop=True)


def city_revenue_rank(dataset, year=CITY_RANK_YEAR):
    """
    Rank cities by total revenue for one year.

    Dense rank: equal revenue shares a rank and ranks run 1..k without gaps.
    """
    logger.info(f"Ranking cities by revenue for {year}")

    orders = orders_with_restaurants(dataset)
    orders = orders[orders['order_date'].dt.year == year]

    revenue = orders.groupby('city', dropna=False).agg(
        total_revenue=('total_amount', 'sum')
    ).reset_index()
    revenue['total_revenue'] = revenue['total_revenue'].round(2)

    revenue = assign_rank(revenue, 'total_revenue', method='dense', column='city_rank')
    return revenue.sort_values(['city_rank', 'city']).reset_index(drop=True)
