"""
Database models for the food delivery dataset.
"""
from sqlalchemy import Column, Integer, String, Numeric, Date, Time, ForeignKey
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Customer(Base):
    """A platform user who places orders."""
    __tablename__ = 'customers'

    customer_id = Column(Integer, primary_key=True, autoincrement=False)
    customer_name = Column(String(25))
    reg_date = Column(Date)


class Restaurant(Base):
    """A food vendor fulfilling orders."""
    __tablename__ = 'restaurants'

    restaurant_id = Column(Integer, primary_key=True, autoincrement=False)
    restaurant_name = Column(String(55))
    city = Column(String(15))
    opening_hours = Column(String(55))


class Rider(Base):
    """A delivery agent."""
    __tablename__ = 'riders'

    rider_id = Column(Integer, primary_key=True, autoincrement=False)
    rider_name = Column(String(55))
    sign_up = Column(Date)


class Order(Base):
    """One purchase transaction."""
    __tablename__ = 'orders'

    order_id = Column(Integer, primary_key=True, autoincrement=False)
    customer_id = Column(Integer, ForeignKey('customers.customer_id'), nullable=False)
    restaurant_id = Column(Integer, ForeignKey('restaurants.restaurant_id'), nullable=False)
    order_item = Column(String(55))
    order_date = Column(Date, nullable=False)
    order_time = Column(Time)
    order_status = Column(String(55), default='Pending', server_default='Pending')
    # Null until the cleaning pass sets it to 0
    total_amount = Column(Numeric(10, 2, asdecimal=False))


class Delivery(Base):
    """Fulfillment record for an order."""
    __tablename__ = 'deliveries'

    delivery_id = Column(Integer, primary_key=True, autoincrement=False)
    order_id = Column(Integer, ForeignKey('orders.order_id'), nullable=False, unique=True)
    delivery_status = Column(String(35), default='Pending', server_default='Pending')
    delivery_time = Column(Time)
    rider_id = Column(Integer, ForeignKey('riders.rider_id'))


# Parents before children
LOAD_ORDER = ['customers', 'restaurants', 'riders', 'orders', 'deliveries']

TABLE_COLUMNS = {
    name: [column.name for column in Base.metadata.tables[name].columns]
    for name in LOAD_ORDER
}

PRIMARY_KEYS = {
    name: [column.name for column in Base.metadata.tables[name].primary_key.columns]
    for name in LOAD_ORDER
}

FOREIGN_KEYS = [
    {'table': 'orders', 'key': 'customer_id', 'ref_table': 'customers', 'ref_key': 'customer_id'},
    {'table': 'orders', 'key': 'restaurant_id', 'ref_table': 'restaurants', 'ref_key': 'restaurant_id'},
    {'table': 'deliveries', 'key': 'order_id', 'ref_table': 'orders', 'ref_key': 'order_id'},
    {'table': 'deliveries', 'key': 'rider_id', 'ref_table': 'riders', 'ref_key': 'rider_id'}
]

# Fields a record must carry, even when the value itself may be null
REQUIRED_FIELDS = {
    'customers': ['customer_id'],
    'restaurants': ['restaurant_id'],
    'riders': ['rider_id'],
    'orders': ['order_id', 'customer_id', 'restaurant_id', 'order_date', 'total_amount'],
    'deliveries': ['delivery_id', 'order_id']
}

NON_NULLABLE = {
    name: [
        column.name for column in Base.metadata.tables[name].columns
        if not column.nullable
    ]
    for name in LOAD_ORDER
}

DEFAULTS = {
    'orders': {'order_status': 'Pending'},
    'deliveries': {'delivery_status': 'Pending'}
}



def _pandas_dtype(column):
    if isinstance(column.type, Integer):
        return 'Int64'
    if isinstance(column.type, Numeric):
        return 'float64'
    if isinstance(column.type, Date):
        return 'datetime64[ns]'
    if isinstance(column.type, Time):
        # Offset from midnight
        return 'timedelta64[ns]'
    return 'object'


COLUMN_DTYPES = {
    name: {column.name: _pandas_dtype(column) for column in Base.metadata.tables[name].columns}
    for name in LOAD_ORDER
}
