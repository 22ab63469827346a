import time
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from sqlalchemy import String, func, or_
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.database import Base, create_db_engine, create_session_factory, check_database_connection
from app.models.database import Restaurant
from app.models.records import RestaurantRecord, join_cuisines, split_cuisines

logger = logging.getLogger(__name__)


class DatabaseServiceError(Exception):
    """Custom exception for database service errors"""
    pass


def current_time_millis() -> int:
    return int(time.time() * 1000)


@dataclass
class UpsertReport:
    """Summary of a batch upsert. Failed records do not stop the batch."""
    saved: int = 0
    failed: int = 0
    failed_ids: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.saved + self.failed


def to_record(row: Restaurant) -> RestaurantRecord:
    return RestaurantRecord(
        id=row.id,
        name=row.name,
        latitude=row.latitude,
        longitude=row.longitude,
        cuisines=split_cuisines(row.cuisines),
        rating=row.rating,
        review_count=row.review_count,
        image_url=row.image_url or "",
        yelp_id=row.yelp_id,
        google_place_id=row.google_place_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class RestaurantStore:
    """
    Durable keyed store of restaurants.

    Owns its engine and session factory. Every operation acquires a session
    and releases it before returning, so no connection is held between calls.

    Reads never raise on storage errors: they log and return None or [].
    Writes report failure through their return value instead of raising.
    """

    def __init__(
        self,
        engine: Engine,
        session_factory: Optional[sessionmaker] = None,
        clock: Callable[[], int] = current_time_millis,
    ):
        self.engine = engine
        self._session_factory = session_factory or create_session_factory(engine)
        self._clock = clock

    @classmethod
    def from_url(cls, database_url: str, **engine_kwargs) -> "RestaurantStore":
        return cls(create_db_engine(database_url, **engine_kwargs))

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def create_schema(self) -> None:
        """
        Create tables if they do not exist yet (idempotent).

        Raises:
            DatabaseServiceError: If the schema cannot be created
        """
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            raise DatabaseServiceError(f"Failed to create schema: {str(e)}")

    def check_connection(self) -> bool:
        return check_database_connection(self.engine)

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database connection pool closed")

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def find_by_id(self, restaurant_id: str) -> Optional[RestaurantRecord]:
        """Return the restaurant with the exact id, or None if not found."""
        try:
            with self._session_factory() as db:
                row = db.get(Restaurant, restaurant_id)
                return to_record(row) if row else None
        except SQLAlchemyError as e:
            logger.error(f"find_by_id failed for id='{restaurant_id}': {str(e)}", exc_info=True)
            return None

    def find_by_name(self, name: str) -> Optional[RestaurantRecord]:
        """Return the newest restaurant whose name contains `name` (case-insensitive)."""
        try:
            with self._session_factory() as db:
                row = (
                    db.query(Restaurant)
                    .filter(func.lower(Restaurant.name, type_=String).contains(name.strip().lower(), autoescape=True))
                    .order_by(Restaurant.created_at.desc())
                    .first()
                )
                return to_record(row) if row else None
        except SQLAlchemyError as e:
            logger.error(f"find_by_name failed for name='{name}': {str(e)}", exc_info=True)
            return None

    def search(self, query: str, limit: int = 20) -> List[RestaurantRecord]:
        """
        Substring search on name and cuisines, case-insensitive.

        Args:
            query: Text to look for
            limit: Maximum number of results

        Returns:
            Matching restaurants, newest first
        """
        needle = query.strip().lower()
        try:
            with self._session_factory() as db:
                rows = (
                    db.query(Restaurant)
                    .filter(or_(
                        func.lower(Restaurant.name, type_=String).contains(needle, autoescape=True),
                        func.lower(Restaurant.cuisines, type_=String).contains(needle, autoescape=True),
                    ))
                    .order_by(Restaurant.created_at.desc())
                    .limit(limit)
                    .all()
                )
                return [to_record(row) for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"search failed for query='{query}': {str(e)}", exc_info=True)
            return []

    def get_trending(self, limit: int = 20) -> List[RestaurantRecord]:
        """Return up to `limit` restaurants ordered by rating descending."""
        try:
            with self._session_factory() as db:
                rows = (
                    db.query(Restaurant)
                    .order_by(Restaurant.rating.desc())
                    .limit(limit)
                    .all()
                )
                return [to_record(row) for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"get_trending failed: {str(e)}", exc_info=True)
            return []

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _apply(self, db: Session, record: RestaurantRecord) -> None:
        now = self._clock()
        existing = db.get(Restaurant, record.id)

        if existing is None:
            db.add(Restaurant(
                id=record.id,
                name=record.name,
                latitude=record.latitude,
                longitude=record.longitude,
                cuisines=join_cuisines(record.cuisines),
                rating=record.rating,
                review_count=record.review_count,
                image_url=record.image_url or "",
                yelp_id=record.yelp_id,
                google_place_id=record.google_place_id,
                created_at=now,
                updated_at=now,
            ))
            db.commit()
            logger.debug(f"Inserted restaurant: {record.name} ({record.id})")
            return

        existing.name = record.name
        existing.latitude = record.latitude
        existing.longitude = record.longitude
        existing.cuisines = join_cuisines(record.cuisines)
        existing.rating = record.rating
        existing.review_count = record.review_count
        # Never blank out a photo or provenance we already have
        if record.image_url:
            existing.image_url = record.image_url
        if record.yelp_id is not None:
            existing.yelp_id = record.yelp_id
        if record.google_place_id is not None:
            existing.google_place_id = record.google_place_id
        existing.updated_at = now
        db.commit()
        logger.debug(f"Updated restaurant: {record.name} ({record.id})")

    def _upsert_once(self, record: RestaurantRecord) -> None:
        with self._session_factory() as db:
            try:
                self._apply(db, record)
            except SQLAlchemyError:
                db.rollback()
                raise

    def upsert(self, record: RestaurantRecord) -> bool:
        """
        Insert the restaurant if its id is new, otherwise update it.

        Args:
            record: Restaurant to persist

        Returns:
            True if the record was saved, False if the storage layer failed
        """
        try:
            self._upsert_once(record)
            return True
        except IntegrityError as e:
            # Either a concurrent insert of the same id won the race (retry
            # lands on the update branch) or the row itself is invalid.
            logger.warning(f"Insert conflict for '{record.id}', retrying as update: {str(e.orig)}")
            try:
                self._upsert_once(record)
                return True
            except SQLAlchemyError as retry_error:
                logger.error(
                    f"Failed to save restaurant '{record.name}' ({record.id}): {str(retry_error)}",
                    exc_info=True,
                )
                return False
        except SQLAlchemyError as e:
            logger.error(f"Failed to save restaurant '{record.name}' ({record.id}): {str(e)}", exc_info=True)
            return False

    def upsert_all(self, records: Iterable[RestaurantRecord]) -> UpsertReport:
        """Upsert each record independently; one failure never aborts the rest."""
        report = UpsertReport()
        for record in records:
            if self.upsert(record):
                report.saved += 1
            else:
                report.failed += 1
                report.failed_ids.append(record.id)

        if report.failed:
            logger.warning(f"Persisted {report.saved}/{report.total} restaurants; failed: {report.failed_ids}")
        else:
            logger.info(f"Persisted {report.saved} restaurants")
        return report
