# database/state_store.py
import copy
import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

import config
from config_manager import DEFAULT_DISTRACTION_SITES
from models import APIConfig, FocusMetrics, ForestState, SessionState

from .config import DatabaseConfig
from .models import Base, StateDocument

logger = logging.getLogger(__name__)


class ConcurrentUpdateError(Exception):
    """A compare-and-swap update kept losing to other writers."""
    pass


def default_documents(clock: Callable[[], float]) -> Dict[str, Callable[[], Any]]:
    """Factories for the document each key reads as before anything was written."""
    return {
        config.SESSION_STATE: lambda: SessionState(last_activity_timestamp=clock()).to_dict(),
        config.FOREST_STATE: lambda: ForestState(last_update=clock()).to_dict(),
        config.FOCUS_METRICS: lambda: FocusMetrics(
            last_activity_timestamp=clock(),
            current_site_arrival_time=clock(),
        ).to_dict(),
        config.API_CONFIG: lambda: APIConfig().to_dict(),
        config.DISTRACTION_SITES: lambda: [site.to_dict() for site in DEFAULT_DISTRACTION_SITES],
        config.WEBSITE_CLASSIFICATIONS: dict,
        config.CACHED_ASSETS: dict,
    }


class SharedStateStore:
    """
    Versioned key/value persistence for the shared documents.

    Every write replaces a whole document. ``set`` is last-write-wins;
    ``merge`` and ``update`` are optimistic compare-and-swap on the row
    version and retry against a fresh read when another writer got there
    first, so two ticks racing on the same document serialize instead of
    silently dropping one mutation.
    """

    def __init__(self, database_url: Optional[str] = None, environment: str = 'development',
                 clock: Callable[[], float] = time.time,
                 max_retries: int = config.STORE_MAX_RETRIES):
        self.database_url = database_url or DatabaseConfig.get_database_url(environment)
        DatabaseConfig.ensure_sqlite_directory(self.database_url)
        self.engine = create_engine(self.database_url,
                                    **DatabaseConfig.get_engine_kwargs(self.database_url))
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine)
        self.clock = clock
        self.max_retries = max_retries
        self._defaults = default_documents(clock)

    def get_db_session(self) -> Session:
        return self.SessionLocal()

    # --- Raw document access ---

    def default(self, key: str) -> Any:
        factory = self._defaults.get(key)
        return factory() if factory else {}

    def get_versioned(self, key: str) -> Tuple[Any, int]:
        """Returns (document, version). Version 0 means nothing is stored yet."""
        try:
            with self.get_db_session() as db_session:
                row = db_session.get(StateDocument, key)
                if row is None:
                    return self.default(key), 0
                payload, version = row.payload, row.version
        except ValueError as e:
            # Undecodable JSON: treat as not yet initialized
            logger.warning(f"Discarding unreadable document '{key}': {e}")
            return self.default(key), self._raw_version(key)

        expected = self.default(key)
        if payload is None or type(payload) is not type(expected):
            logger.warning(f"Document '{key}' has unexpected shape, using defaults")
            return expected, version
        return payload, version

    def get(self, key: str) -> Any:
        return self.get_versioned(key)[0]

    def compare_and_set(self, key: str, value: Any, expected_version: int) -> bool:
        """Writes ``value`` only if the stored version still equals ``expected_version``."""
        with self.get_db_session() as db_session:
            try:
                if expected_version == 0:
                    db_session.add(StateDocument(key=key, payload=value, version=1))
                    db_session.commit()
                    return True

                updated = db_session.query(StateDocument).filter_by(
                    key=key, version=expected_version
                ).update({
                    StateDocument.payload: value,
                    StateDocument.version: expected_version + 1,
                    StateDocument.updated_at: datetime.now(),
                }, synchronize_session=False)
                db_session.commit()
                return updated == 1
            except IntegrityError:
                # Someone inserted the document first
                db_session.rollback()
                return False
            except Exception as e:
                db_session.rollback()
                logger.error(f"Error writing document '{key}': {e}")
                raise

    def set(self, key: str, value: Any) -> None:
        """Unconditional write; the last writer wins."""
        for _ in range(self.max_retries):
            version = self._raw_version(key)
            if version == 0:
                if self.compare_and_set(key, value, 0):
                    return
                continue
            with self.get_db_session() as db_session:
                try:
                    updated = db_session.query(StateDocument).filter_by(key=key).update({
                        StateDocument.payload: value,
                        StateDocument.version: StateDocument.version + 1,
                        StateDocument.updated_at: datetime.now(),
                    }, synchronize_session=False)
                    db_session.commit()
                except Exception as e:
                    db_session.rollback()
                    logger.error(f"Error writing document '{key}': {e}")
                    raise
            if updated == 1:
                return
        raise ConcurrentUpdateError(f"Could not write document '{key}'")

    def update(self, key: str, fn: Callable[[Any], Any]) -> Any:
        """
        Read-modify-write with compare-and-swap.

        ``fn`` receives a private copy of the current document and returns the
        new one, or None to abort without writing. It may run more than once.
        Returns the written document (or None when aborted).
        """
        for attempt in range(self.max_retries):
            current, version = self.get_versioned(key)
            new_value = fn(copy.deepcopy(current))
            if new_value is None:
                return None
            if self.compare_and_set(key, new_value, version):
                return new_value
            logger.debug(f"Version conflict on '{key}' (attempt {attempt + 1}), retrying")
        raise ConcurrentUpdateError(
            f"Gave up updating '{key}' after {self.max_retries} conflicting writes"
        )

    def merge(self, key: str, partial: Dict[str, Any]) -> Dict[str, Any]:
        """Shallow-merges ``partial`` into a dict document."""
        return self.update(key, lambda current: {**current, **partial})

    def remove(self, key: str) -> None:
        with self.get_db_session() as db_session:
            db_session.query(StateDocument).filter_by(key=key).delete()
            db_session.commit()

    def keys(self) -> List[str]:
        with self.get_db_session() as db_session:
            return [row.key for row in db_session.query(StateDocument.key).all()]

    def _raw_version(self, key: str) -> int:
        with self.get_db_session() as db_session:
            row = db_session.query(StateDocument.version).filter_by(key=key).first()
            return row[0] if row else 0

    # --- Typed accessors ---

    def session_state(self) -> SessionState:
        return SessionState.from_dict(self.get(config.SESSION_STATE))

    def forest_state(self) -> ForestState:
        return ForestState.from_dict(self.get(config.FOREST_STATE))

    def focus_metrics(self) -> FocusMetrics:
        return FocusMetrics.from_dict(self.get(config.FOCUS_METRICS))

    def api_config(self) -> APIConfig:
        return APIConfig.from_dict(self.get(config.API_CONFIG))

    def close(self) -> None:
        self.engine.dispose()
