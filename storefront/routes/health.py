import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
from datetime import datetime, timezone

from storefront.database import get_session
from storefront.models.storage_entry import StorageEntry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/check")
def health_check(session: Session = Depends(get_session)):
    """Checkout state can only persist if the client storage table is readable."""
    storage_status = "ok"
    stored_keys = None

    try:
        stored_keys = len(session.exec(select(StorageEntry.key)).all())
    except SQLAlchemyError as e:
        logger.error(f"Client storage check failed: {e}")
        storage_status = "failed"

    return {
        "status": "ok" if storage_status == "ok" else "degraded",
        "storage": storage_status,
        "stored_keys": stored_keys,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
