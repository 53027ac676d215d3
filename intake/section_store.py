"""
Section Store

In-memory, session-scoped mapping of wizard section keys to partial
records. Every write is a non-destructive merge; reads of unknown sections
return an empty record.

One store belongs to exactly one editing session. The SessionRegistry hands
out isolated stores so concurrent wizard sessions never share state.
"""

import copy
import logging
import threading
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)


class SectionStore:
    """
    Holds all in-progress wizard data keyed by section.

    Args:
        sections: Optional mapping of section key to its declared field
            names. Declared sections only accept their own fields.
    """

    def __init__(self, sections: Optional[Mapping[str, Iterable[str]]] = None):
        self._data: Dict[str, Dict[str, Any]] = {}
        self._declared: Dict[str, frozenset] = {
            key: frozenset(fields) for key, fields in (sections or {}).items()
        }

    def __repr__(self):
        return f'<SectionStore {sorted(self._data)}>'

    def _valid_section(self, section: Any) -> bool:
        if isinstance(section, str):
            return True
        logger.warning(f'Ignoring non-string section key {section!r}')
        return False

    def _accepts(self, section: str, field: Any) -> bool:
        if not isinstance(field, str):
            logger.warning(f'Ignoring non-string field name {field!r} for section {section!r}')
            return False
        declared = self._declared.get(section)
        if declared is not None and field not in declared:
            logger.warning(f'Ignoring undeclared field {field!r} for section {section!r}')
            return False
        return True

    def write(self, section: str, values: Any) -> None:
        """Merge field/value pairs into a section, keeping unrelated fields."""
        if not isinstance(values, Mapping) or not self._valid_section(section):
            return
        record = self._data.setdefault(section, {})
        for field, value in values.items():
            if self._accepts(section, field):
                record[field] = copy.deepcopy(value)

    def set_field(self, section: str, field: str, value: Any) -> None:
        """Set a single field of a section."""
        if self._valid_section(section) and self._accepts(section, field):
            self._data.setdefault(section, {})[field] = copy.deepcopy(value)

    def write_field_or_values(self, section: str, field_or_values: Any, value: Any = None) -> None:
        """Dual-mode write: a mapping merges, anything else names one field."""
        if isinstance(field_or_values, Mapping):
            self.write(section, field_or_values)
        else:
            self.set_field(section, field_or_values, value)

    def read(self, section: str) -> Dict[str, Any]:
        """Return a copy of a section record ({} if never written)."""
        if not isinstance(section, str):
            return {}
        return copy.deepcopy(self._data.get(section, {}))

    def get(self, section: str, field: str, default: Any = None) -> Any:
        """Read one field, tolerating a missing section."""
        if not isinstance(section, str) or not isinstance(field, str):
            return default
        return copy.deepcopy(self._data.get(section, {}).get(field, default))

    def reset(self) -> None:
        self._data = {}

    def export(self) -> Dict[str, Dict[str, Any]]:
        """Return a deep copy of every section."""
        return copy.deepcopy(self._data)

    def load(self, data: Any) -> None:
        """Replace the store contents wholesale (edit mode)."""
        self.reset()
        if not isinstance(data, Mapping):
            return
        for section, values in data.items():
            if isinstance(values, Mapping):
                self.write(section, values)


class SessionRegistry:
    """
    Keeps one WizardSession per editing session.

    Sessions idle for longer than ttl_seconds are treated as abandoned and
    dropped on access or by purge_expired().
    """

    def __init__(self, ttl_seconds: int = 3600):
        self.ttl = timedelta(seconds=ttl_seconds)
        self._sessions: Dict[str, Any] = {}
        self._touched: Dict[str, datetime] = {}
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._sessions)

    def create(self, wizard) -> Any:
        """Start a new session for a wizard definition."""
        # Imported here to avoid a circular import with forms
        from intake.forms import WizardSession

        session_id = uuid.uuid4().hex
        session = WizardSession(session_id, wizard)
        with self._lock:
            self._sessions[session_id] = session
            self._touched[session_id] = datetime.utcnow()
        return session

    def get(self, session_id: str):
        """Return a live session or raise KeyError."""
        now = datetime.utcnow()
        with self._lock:
            touched = self._touched.get(session_id)
            if touched is None:
                raise KeyError(session_id)
            if now - touched > self.ttl:
                self._sessions.pop(session_id, None)
                self._touched.pop(session_id, None)
                raise KeyError(session_id)
            self._touched[session_id] = now
            return self._sessions[session_id]

    def discard(self, session_id: str) -> bool:
        with self._lock:
            self._touched.pop(session_id, None)
            return self._sessions.pop(session_id, None) is not None

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        """Drop idle sessions; returns how many were removed."""
        now = now or datetime.utcnow()
        with self._lock:
            expired = [sid for sid, touched in self._touched.items() if now - touched > self.ttl]
            for sid in expired:
                self._sessions.pop(sid, None)
                self._touched.pop(sid, None)
        return len(expired)
