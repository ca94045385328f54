import logging
import multiprocessing
import os

from app.app import init_db
from app.core.utils.config import construct_prod_settings
from app.core.utils.log import LogConfig

# Usage: `gunicorn app.main:app --worker-class uvicorn.workers.UvicornWorker`
# Settings can be overridden with environment variables, as in the uvicorn-gunicorn-docker image:
# https://github.com/tiangolo/uvicorn-gunicorn-docker/blob/master/docker-images/gunicorn_conf.py

settings = construct_prod_settings()


def get_workers_count() -> int:
    if web_concurrency := os.getenv("WEB_CONCURRENCY"):
        return int(web_concurrency)

    workers_per_core = float(os.getenv("WORKERS_PER_CORE", "1"))
    count = max(int(workers_per_core * multiprocessing.cpu_count()), 2)
    if max_workers := os.getenv("MAX_WORKERS"):
        count = min(count, int(max_workers))
    return count


bind = os.getenv("BIND") or f"{os.getenv('HOST', '0.0.0.0')}:{settings.PORT}"  # noqa: S104
workers = get_workers_count()
loglevel = os.getenv("LOG_LEVEL", "info")
worker_tmp_dir = "/dev/shm"  # noqa: S108
graceful_timeout = int(os.getenv("GRACEFUL_TIMEOUT", "120"))
timeout = int(os.getenv("TIMEOUT", "120"))
keepalive = int(os.getenv("KEEP_ALIVE", "5"))


def on_starting(server) -> None:
    """
    Called in the arbiter before workers are forked: the database is initialized here, once.

    See https://docs.gunicorn.org/en/stable/settings.html#on-starting
    """
    # Inherited by the workers, their lifespan then skips the database initialization
    os.environ["RECOMMENDATIONS_INIT_DB"] = "False"

    LogConfig().initialize_loggers(settings=settings)
    error_logger = logging.getLogger("recommendations.error")

    error_logger.warning("Gunicorn: initializing the database")

    init_db(
        settings=settings,
        error_logger=error_logger,
        drop_db=False,
    )
