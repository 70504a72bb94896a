import pytest
from ingestion.loader import load_dataset
from transformation.cleaning import normalize_amounts

AS_OF = '2024-06-30'

CUSTOMERS = [
    {'customer_id': 1, 'customer_name': 'Arjun Mehta', 'reg_date': '2022-01-10'},
    {'customer_id': 2, 'customer_name': 'Priya Sharma', 'reg_date': '2022-03-15'},
    {'customer_id': 3, 'customer_name': 'Rahul Verma', 'reg_date': '2023-02-01'},
    {'customer_id': 4, 'customer_name': 'Neha Gupta', 'reg_date': '2022-05-20'},
]

RESTAURANTS = [
    {'restaurant_id': 1, 'restaurant_name': 'Spice Route', 'city': 'Delhi', 'opening_hours': '10:00 AM - 11:00 PM'},
    {'restaurant_id': 2, 'restaurant_name': 'Pasta Palace', 'city': 'Delhi', 'opening_hours': '11:00 AM - 11:30 PM'},
    {'restaurant_id': 3, 'restaurant_name': 'Curry House', 'city': 'Mumbai', 'opening_hours': '9:00 AM - 2:00 AM'},
]

RIDERS = [
    {'rider_id': 1, 'rider_name': 'Ravi Kumar', 'sign_up': '2022-05-01'},
    {'rider_id': 2, 'rider_name': 'Sunil Yadav', 'sign_up': '2022-07-12'},
]

# order_id, customer_id, restaurant_id, order_item, order_date, order_time, total_amount
ORDER_ROWS = [
    (1, 1, 2, 'Pasta', '2024-01-05', '12:15', 300),
    (2, 1, 2, 'Pasta', '2024-01-20', '13:40', 320),
    (3, 1, 2, 'Pasta', '2024-02-11', '19:05', 310),
    (4, 1, 2, 'Pasta', '2024-03-02', '20:30', 305),
    (5, 1, 2, 'Pasta', '2024-03-18', '21:10', 300),
    (6, 1, 2, 'Pasta', '2023-11-25', '23:50', 295),
    (7, 1, 1, 'Pizza', '2023-08-14', '18:20', 450),
    (8, 1, 1, 'Pizza', '2023-09-09', '19:45', 460),
    (9, 1, 1, 'Pizza', '2024-04-01', '20:05', 455),
    (10, 1, 1, 'Pizza', '2024-05-12', '11:30', 440),
    (11, 1, 3, 'Salad', '2024-06-01', '09:15', 150),
    (12, 1, 3, 'Burger', '2022-12-30', '14:00', 200),
    (13, 2, 3, 'Biryani', '2023-03-10', '13:00', 520),
    (14, 2, 3, 'Biryani', '2023-07-22', '20:15', None),
    (15, 3, 1, 'Pizza', '2023-12-24', '01:30', 480),
    (16, 3, 3, 'Biryani', '2024-02-14', '00:45', 510),
    (17, 4, 3, 'Salad', '2022-06-15', '10:30', 120),
]

# delivery_id, order_id, delivery_status, delivery_time, rider_id
DELIVERY_ROWS = [
    (1, 1, 'Delivered', '12:40', 1),
    (2, 2, 'Delivered', '13:50', 1),
    (3, 3, 'Delivered', '19:22', 2),
    (4, 4, 'Pending', None, 2),
    (5, 6, 'Delivered', '00:10', 2),
    (6, 7, 'Delivered', '18:32', 1),
    (7, 13, 'Delivered', '13:30', 2),
    (8, 15, 'Delivered', '01:44', 1),
    (9, 16, 'Delivered', '01:05', 2),
]


def order(order_id, customer_id, restaurant_id, item, order_date, order_time='12:00', amount=100.0, **extra):
    row = {
        'order_id': order_id,
        'customer_id': customer_id,
        'restaurant_id': restaurant_id,
        'order_item': item,
        'order_date': order_date,
        'order_time': order_time,
        'total_amount': amount,
    }
    row.update(extra)
    return row


def delivery(delivery_id, order_id, status, delivery_time, rider_id):
    return {
        'delivery_id': delivery_id,
        'order_id': order_id,
        'delivery_status': status,
        'delivery_time': delivery_time,
        'rider_id': rider_id,
    }


def sources():
    return {
        'customers': [dict(row) for row in CUSTOMERS],
        'restaurants': [dict(row) for row in RESTAURANTS],
        'riders': [dict(row) for row in RIDERS],
        'orders': [order(*row) for row in ORDER_ROWS],
        'deliveries': [delivery(*row) for row in DELIVERY_ROWS],
    }


@pytest.fixture
def raw_dataset():
    """Fixture data as loaded, before the amount cleaning pass."""
    return load_dataset(sources())


@pytest.fixture
def dataset(raw_dataset):
    normalize_amounts(raw_dataset)
    return raw_dataset
