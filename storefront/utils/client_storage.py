import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from storefront.errors import StorageUnavailable
from storefront.models.storage_entry import StorageEntry, utc_now

logger = logging.getLogger(__name__)


class ClientStorage:
    """
    String key/value storage that outlives a single checkout context.

    Mirrors browser local storage: every write replaces the previous value
    for the key, last write wins.
    """

    def __init__(self, engine):
        self.engine = engine

    def get_item(self, key: str) -> Optional[str]:
        try:
            with Session(self.engine) as session:
                entry = session.get(StorageEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as e:
            logger.error(f"Storage read failed for '{key}': {e}")
            raise StorageUnavailable(f"Could not read '{key}' from storage") from e

    def set_item(self, key: str, value: str) -> None:
        try:
            with Session(self.engine) as session:
                entry = session.get(StorageEntry, key)
                if entry:
                    entry.value = value
                    entry.updated_at = utc_now()
                else:
                    entry = StorageEntry(key=key, value=value)
                session.add(entry)
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Storage write failed for '{key}': {e}")
            raise StorageUnavailable(f"Could not write '{key}' to storage") from e

    def remove_item(self, key: str) -> None:
        try:
            with Session(self.engine) as session:
                entry = session.get(StorageEntry, key)
                if entry:
                    session.delete(entry)
                    session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Storage delete failed for '{key}': {e}")
            raise StorageUnavailable(f"Could not remove '{key}' from storage") from e
