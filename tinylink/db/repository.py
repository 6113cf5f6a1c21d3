from contextlib import contextmanager
from typing import List, Optional
import logging

from sqlalchemy import create_engine, text, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from tinylink.core.exceptions import CodeExistsError, LinkNotFoundError, StorageUnavailableError
from tinylink.db.base import LinkStorage
from tinylink.db.Models.models import Base, LinkItem, utcnow
from tinylink.schemas.LinkRecord import LinkRecord

logger = logging.getLogger(__name__)


def make_engine(database_url: str) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, pool_pre_ping=True, future=True, connect_args=connect_args)


class SQLLinkStorage(LinkStorage):
    """Relational backend. Uniqueness rests on the table's unique index and
    click accounting on a single UPDATE statement."""

    name = "sql"

    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None):
        if engine is None:
            if not database_url:
                raise ValueError("SQL storage needs a DATABASE_URL or an engine")
            engine = make_engine(database_url)
        self.engine = engine
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
        try:
            Base.metadata.create_all(bind=engine)
        except DBAPIError as e:
            logger.error("Database unreachable at startup: %s", e)
            engine.dispose()
            raise StorageUnavailableError(str(e.orig) if e.orig is not None else str(e)) from e
        logger.info("SQL link storage ready on %s", engine.url.render_as_string(hide_password=True))

    @contextmanager
    def _session(self):
        db: Session = self.SessionLocal()
        try:
            yield db
        except IntegrityError:
            raise
        except DBAPIError as e:
            logger.error("Database error: %s", e, exc_info=True)
            raise StorageUnavailableError(str(e.orig) if e.orig is not None else str(e)) from e
        finally:
            db.close()

    def _commit_and_refresh(self, db: Session, item: LinkItem) -> LinkItem:
        try:
            db.add(item)
            db.commit()
            db.refresh(item)
            return item
        except IntegrityError as e:
            db.rollback()
            logger.info("IntegrityError creating link code=%s: %s", item.code, e.orig)
            raise CodeExistsError(item.code) from e

    def insert(self, code: str, target_url: str) -> LinkRecord:
        with self._session() as db:
            item = LinkItem(code=code, target_url=target_url, total_clicks=0, created_at=utcnow())
            item = self._commit_and_refresh(db, item)
            return LinkRecord.model_validate(item)

    def list(self) -> List[LinkRecord]:
        with self._session() as db:
            items = (
                db.query(LinkItem)
                .order_by(LinkItem.created_at.desc(), LinkItem.id.desc())
                .all()
            )
            return [LinkRecord.model_validate(i) for i in items]

    def find_by_code(self, code: str) -> LinkRecord:
        with self._session() as db:
            item = db.query(LinkItem).filter(LinkItem.code == code).first()
            if item is None:
                raise LinkNotFoundError(code)
            return LinkRecord.model_validate(item)

    def increment_clicks(self, code: str) -> str:
        stmt = (
            update(LinkItem)
            .where(LinkItem.code == code)
            .values(total_clicks=LinkItem.total_clicks + 1, last_clicked=utcnow())
            .execution_options(synchronize_session=False)
        )
        with self._session() as db:
            if self.engine.dialect.update_returning:
                target_url = db.execute(stmt.returning(LinkItem.target_url)).scalar_one_or_none()
            else:
                # Same transaction, so the read sees our own update
                result = db.execute(stmt)
                target_url = None
                if result.rowcount:
                    target_url = db.query(LinkItem.target_url).filter(LinkItem.code == code).scalar()
            if target_url is None:
                db.rollback()
                raise LinkNotFoundError(code)
            db.commit()
            return target_url

    def delete(self, code: str) -> None:
        with self._session() as db:
            deleted = db.query(LinkItem).filter(LinkItem.code == code).delete(synchronize_session=False)
            if not deleted:
                db.rollback()
                raise LinkNotFoundError(code)
            db.commit()

    def health_check(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database connection failed: {e}")
            return False

    def close(self) -> None:
        self.engine.dispose()
