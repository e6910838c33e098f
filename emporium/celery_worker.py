# emporium/celery_worker.py
from celery import Celery

from emporium.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "cart",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# taski importowane explicite, zeby celery je zarejestrowal
celery_app.conf.imports = (
    "emporium.tasks.expire",
)

celery_app.conf.beat_schedule = {
    "expire-carts-every-minute": {
        "task": "emporium.tasks.expire.expire_carts_task",
        "schedule": 60.0,  # co 60 sekund
    },
}

celery_app.conf.timezone = "UTC"
