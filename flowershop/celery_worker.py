# flowershop/celery_worker.py
from celery import Celery

from flowershop.utils.settings import CELERY_BROKER_TIMEOUT_SECONDS, CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "flowershop",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks must be imported explicitly so the worker registers them
celery_app.conf.imports = (
    "flowershop.services.notification_service",
)

celery_app.conf.task_ignore_result = True
# fail fast when the broker is down, publishing is best effort
celery_app.conf.task_publish_retry = False
celery_app.conf.timezone = "UTC"
celery_app.conf.broker_connection_timeout = CELERY_BROKER_TIMEOUT_SECONDS
celery_app.conf.broker_transport_options = {"socket_connect_timeout": CELERY_BROKER_TIMEOUT_SECONDS}
