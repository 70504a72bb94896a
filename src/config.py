"""
Configuration handling for the food delivery analytics pipeline.
"""
import os
import logging
import configparser
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()
# Load environment variables
POSTGRES_HOST = os.getenv("POSTGRES_HOST", "localhost")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")
POSTGRES_DB = os.getenv("POSTGRES_DB", "food_delivery")
POSTGRES_USER = os.getenv("POSTGRES_USER", "postgres")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "")

logger = logging.getLogger(__name__)


class Config:
    """Configuration manager for the food delivery analytics pipeline."""

    def __init__(self, config_file='config.ini'):
        """
        Initialize configuration from config file.
        """
        self.config = configparser.ConfigParser()

        # Set default values
        self._set_defaults()

        # Try to read from config file
        config_path = Path(config_file)
        found = config_path.exists()
        if found:
            self.config.read(config_path)
        self._setup_logging()

        if not found:
            logger.warning(f"Config file {config_file} not found. Using defaults.")

    def _set_defaults(self):
        """Set default configuration values."""
        self.config['DATABASE'] = {
            'type': 'postgresql',
            'name': POSTGRES_DB,
            'host': POSTGRES_HOST,
            'port': POSTGRES_PORT,
            'user': POSTGRES_USER,
            'password': POSTGRES_PASSWORD
        }

        self.config['LOGGING'] = {
            'level': 'INFO',
            'file': 'logs/analytics.log'
        }

        self.config['PATHS'] = {
            'output_dir': 'data/output'
        }

        self.config['PIPELINE'] = {
            'quality_check': 'true',
            'normalize_in_db': 'true',
            'write_results': 'false',
            'export_csv': 'false',
            'as_of': ''
        }

    def _setup_logging(self):
        """Configure logging based on settings."""
        log_config = self.config['LOGGING']
        log_level = getattr(logging, log_config.get('level', 'INFO').upper(), logging.INFO)
        log_file = log_config.get('file', 'logs/analytics.log')

        handlers = [logging.StreamHandler()]
        if log_file:
            # Create directory for log file if it doesn't exist
            log_dir = os.path.dirname(log_file)
            if log_dir and not os.path.exists(log_dir):
                os.makedirs(log_dir)
            handlers.insert(0, logging.FileHandler(log_file))

        logging.basicConfig(
            level=log_level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=handlers
        )

    def get_database_config(self):
        """
        Get database configuration.
        """
        return {
            'type': self.config['DATABASE'].get('type'),
            'name': self.config['DATABASE'].get('name'),
            'host': self.config['DATABASE'].get('host'),
            'port': self.config['DATABASE'].get('port'),
            'user': self.config['DATABASE'].get('user'),
            'password': self.config['DATABASE'].get('password')
        }

    def get_output_path(self, filename=None):
        """
        Get output directory or file path.
        """
        output_dir = self.config['PATHS'].get('output_dir', 'data/output')

        # Create directory if it doesn't exist
        if not os.path.exists(output_dir):
            os.makedirs(output_dir)

        if filename:
            return os.path.join(output_dir, filename)
        return output_dir

    def get_as_of(self):
        """
        Reference date for the rolling one-year queries, or None for today.
        """
        value = self.config['PIPELINE'].get('as_of', '').strip()
        return value or None

    def is_quality_check_enabled(self):
        return self.config['PIPELINE'].getboolean('quality_check', True)

    def is_db_normalization_enabled(self):
        return self.config['PIPELINE'].getboolean('normalize_in_db', True)

    def is_write_results_enabled(self):
        return self.config['PIPELINE'].getboolean('write_results', False)

    def is_export_csv_enabled(self):
        return self.config['PIPELINE'].getboolean('export_csv', False)
