"""JSON file persistence shared by the plan and completion repositories.

Each store file gets one process-wide re-entrant lock, so a repository can hold
it across a read-decide-write sequence while its own read/write calls re-enter.
Writes go to a temp file in the same directory and are moved into place.
"""
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from threading import Lock, RLock
from typing import Any, Callable, Dict

from dietplan.domain.errors import CollaboratorUnavailableError

logger = logging.getLogger(__name__)

_locks: Dict[str, RLock] = {}
_locks_guard = Lock()


def lock_for(path: Path) -> RLock:
    key = str(Path(path).resolve())
    with _locks_guard:
        if key not in _locks:
            _locks[key] = RLock()
        return _locks[key]


class JsonFileStore:
    def __init__(self, path: Path, default_factory: Callable[[], Any] = dict):
        self.path = Path(path)
        self._default_factory = default_factory
        self.lock = lock_for(self.path)

    def load(self):
        """Return the stored document, or an empty one when the file does not exist yet."""
        with self.lock:
            if not self.path.exists():
                return self._default_factory()
            try:
                with open(self.path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                logger.error(f"Invalid JSON in {self.path.name}: {e}")
                raise CollaboratorUnavailableError(f"Store {self.path.name} is unreadable") from e
            except OSError as e:
                logger.error(f"Error reading {self.path.name}: {e}")
                raise CollaboratorUnavailableError(f"Store {self.path.name} is unreachable") from e
            if data is None:
                return self._default_factory()
            return data

    def save(self, data) -> None:
        with self.lock:
            tmp_path = None
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(
                    dir=str(self.path.parent), prefix=f".{self.path.stem}_", suffix=".json"
                )
                with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                    json.dump(data, tmp, indent=2, ensure_ascii=False)
                shutil.move(tmp_path, str(self.path))
            except OSError as e:
                logger.error(f"Error writing {self.path.name}: {e}")
                raise CollaboratorUnavailableError(f"Store {self.path.name} is not writable") from e
            finally:
                if tmp_path and os.path.exists(tmp_path):
                    try:
                        os.remove(tmp_path)
                    except OSError:
                        logger.warning(f"Could not remove temp file {tmp_path}")
