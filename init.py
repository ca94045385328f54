import logging

from app.app import init_db
from app.core.utils.config import construct_prod_settings
from app.core.utils.log import LogConfig

# Create the tables or run the migrations without starting the server
# Usage: `python init.py`, then start uvicorn with `RECOMMENDATIONS_INIT_DB=False`

# We call `construct_prod_settings()` and not the dependency `get_settings()`
# as we know we want to use the production settings
settings = construct_prod_settings()

# Initialize loggers
LogConfig().initialize_loggers(settings=settings)

error_logger = logging.getLogger("recommendations.error")

error_logger.warning(
    "Initializing the database.",
)

init_db(
    settings=settings,
    error_logger=error_logger,
    drop_db=False,
)
