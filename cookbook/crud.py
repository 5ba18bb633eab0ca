import json
import logging
from typing import Callable, Dict, Optional

from sqlalchemy.orm import Session

from . import models

logger = logging.getLogger(__name__)


def decode_map(raw: Optional[str]) -> Optional[Dict[str, str]]:
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring corrupt JSON in key-value store")
        return None
    return data if isinstance(data, dict) else None


def get_setting(db: Session, key: str):
    return db.query(models.Setting).filter(models.Setting.key == key).first()


def get_value(db: Session, key: str) -> Optional[str]:
    row = get_setting(db, key)
    return row.value if row else None


def set_value(db: Session, key: str, value: str):
    row = get_setting(db, key)
    if row is None:
        row = models.Setting(key=key, value=value)
    else:
        row.value = value
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def delete_value(db: Session, key: str) -> bool:
    row = get_setting(db, key)
    if not row:
        return False
    db.delete(row)
    db.commit()
    return True


class KeyValueStore:
    """String key-value store on top of the settings table.

    Stands in for the browser's local storage: it holds the language
    preference and the per-language translation maps.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        db = self._session_factory()
        try:
            return get_value(db, key)
        finally:
            db.close()

    def set(self, key: str, value: str) -> None:
        db = self._session_factory()
        try:
            set_value(db, key, value)
        finally:
            db.close()

    def delete(self, key: str) -> bool:
        db = self._session_factory()
        try:
            return delete_value(db, key)
        finally:
            db.close()

    def get_json(self, key: str) -> Optional[Dict[str, str]]:
        return decode_map(self.get(key))

    def set_json(self, key: str, data: Dict[str, str]) -> None:
        self.set(key, json.dumps(data, ensure_ascii=False))


class MemoryStore:
    """Dict-backed store with the same interface, for builds and requests without a database."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def get_json(self, key: str) -> Optional[Dict[str, str]]:
        return decode_map(self.get(key))

    def set_json(self, key: str, data: Dict[str, str]) -> None:
        self.set(key, json.dumps(data, ensure_ascii=False))
