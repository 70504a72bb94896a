"""
Database connection handling for the food delivery analytics pipeline.
"""
import logging
from sqlalchemy import create_engine
from config import Config
from db.models import Base

logger = logging.getLogger(__name__)


def build_connection_string(db_config):
    """
    Build a SQLAlchemy URL from the DATABASE config section.
    """
    if db_config['type'] == 'sqlite':
        name = db_config['name']
        return "sqlite://" if name in (None, '', ':memory:') else f"sqlite:///{name}"
    elif db_config['type'] == 'postgresql':
        return f"postgresql+psycopg2://{db_config['user']}:{db_config['password']}@{db_config['host']}:{db_config['port']}/{db_config['name']}"

    raise ValueError(f"Unsupported database type: {db_config['type']}")


def create_db_engine(config=None):

    try:
        if config is None:
            config = Config()

        db_config = config.get_database_config()
        engine = create_engine(build_connection_string(db_config))
        logger.info(f"Database connection created for {db_config['type']}")
        return engine
    except Exception as e:
        logger.error(f"Failed to create database connection: {str(e)}")
        raise


def create_schema(engine, base=Base):
    """
    Drop and recreate the five dataset tables.

    drop_all walks the foreign keys in reverse, so deliveries go first and
    the parent tables last.
    """
    base.metadata.drop_all(engine)
    base.metadata.create_all(engine)
    logger.info("Database schema recreated")
