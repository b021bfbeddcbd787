from sqlmodel import SQLModel, create_engine, Session
from storefront.config import settings


def _connect_args(url: str):
    # sqlite connections are shared with FastAPI's worker threads
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.STORAGE_DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.STORAGE_DATABASE_URL),
)


def create_db_and_tables(bind=None):
    from storefront.models import storage_entry  # noqa: F401
    SQLModel.metadata.create_all(bind or engine)


def get_session():
    with Session(engine) as session:
        yield session
