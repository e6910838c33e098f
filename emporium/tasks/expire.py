# emporium/tasks/expire.py
from emporium.celery_worker import celery_app
from emporium.data.database import SessionLocal
from emporium.services.cart_service import CartService
from emporium.services.lock_service import LockService
from emporium.utils.logging import get_logger

logger = get_logger(__name__)


def run_expiry(session_factory=SessionLocal, lock_service: LockService | None = None) -> int:
    db = session_factory()
    try:
        svc = CartService(db=db, lock_service=lock_service or LockService())
        return svc.expire_stale_carts()
    finally:
        db.close()


@celery_app.task(name="emporium.tasks.expire.expire_carts_task")
def expire_carts_task():
    logger.info("Expire carts task started")
    expired = run_expiry()
    logger.info(f"Expired {expired} carts")
    return {"expired": expired}
