import logging

import config
from utils.logging_config import setup_logging

# Initialize centralized logging configuration
setup_logging()

# Validate critical configuration before the app is imported
from utils.config_validator import validate_or_exit
validate_or_exit(config)

from app import main

# Silence SQL loggers; statements would flood the application log
for logger_name in ['aiosqlite', 'sqlalchemy', 'sqlalchemy.engine', 'sqlalchemy.pool', 'sqlalchemy.orm']:
    logging.getLogger(logger_name).setLevel(logging.WARNING)

logging.info("🔇 SQL loggers silenced (aiosqlite, sqlalchemy.*)")

if __name__ == '__main__':
    main()
