"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for job storage. Each row holds one encoded job
under its token; the mapping is pickled so auth payloads keep their exact
type and bytes.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import Column, DateTime, PickleType, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .storage import KeyValueStore

Base = declarative_base()


class JobEntry(Base):
    """Encoded portability job."""

    __tablename__ = "job_entries"

    key = Column(String, primary_key=True)  # job token
    data = Column(PickleType, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    engine.dispose()


class SqlKeyValueStore(KeyValueStore):
    """Key-value store backed by the ``job_entries`` table."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        init_database(self.db_path)
        self._engine = create_engine(f"sqlite:///{self.db_path}")
        self._Session = sessionmaker(bind=self._engine)

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._Session() as session:
            entry = session.get(JobEntry, key)
            return dict(entry.data) if entry is not None else None

    def put(self, key: str, data: Mapping[str, Any]) -> None:
        with self._Session() as session:
            entry = session.get(JobEntry, key)
            if entry is None:
                session.add(JobEntry(key=key, data=dict(data)))
            else:
                # Assign a new dict so the change is flushed
                entry.data = dict(data)
            session.commit()

    def keys(self) -> List[str]:
        with self._Session() as session:
            rows = session.query(JobEntry.key).order_by(JobEntry.created_at, JobEntry.key).all()
            return [key for (key,) in rows]

    def close(self) -> None:
        self._engine.dispose()
