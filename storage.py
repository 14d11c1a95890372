"""Key/value persistence for the collections: one JSON array per key."""
import json
import logging
from typing import Any, Dict, List, Mapping

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from database import Base, make_session_factory
from errors import PersistenceError
from models import CollectionRecord
from schemas import COLLECTIONS
from utils import now_iso

logger = logging.getLogger(__name__)


class CollectionStorage:
    def __init__(self, engine):
        self.engine = engine
        self.session_factory = make_session_factory(engine)

    def ensure_schema(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def load_all(self) -> Dict[str, List[Any]]:
        """Every known key, absent ones as empty lists."""
        loaded: Dict[str, List[Any]] = {key: [] for key in COLLECTIONS}
        try:
            with self.session_factory() as db:
                for rec in db.scalars(select(CollectionRecord)):
                    if rec.key in loaded and rec.payload:
                        loaded[rec.key] = json.loads(rec.payload)
        except SQLAlchemyError as exc:
            logger.exception("loading collections failed")
            raise PersistenceError("could not load collections") from exc
        return loaded

    def save(self, key: str, items: List[Any]) -> None:
        self.save_many({key: items})

    def save_many(self, collections: Mapping[str, List[Any]]) -> None:
        """Replace each given collection in full, all in one transaction."""
        ts = now_iso()
        db = self.session_factory()
        try:
            for key, items in collections.items():
                if key not in COLLECTIONS:
                    raise KeyError(f"unknown collection {key!r}")
                rec = db.get(CollectionRecord, key)
                payload = json.dumps(items)
                if rec is None:
                    db.add(CollectionRecord(key=key, payload=payload, updated_at=ts))
                else:
                    rec.payload = payload
                    rec.updated_at = ts
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("saving %s failed", ", ".join(collections))
            raise PersistenceError(f"could not save {', '.join(collections)}") from exc
        finally:
            db.close()
        logger.debug("saved %s", ", ".join(collections))
