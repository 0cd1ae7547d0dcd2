"""State repositories: whole-document load/save of the AppState.

There is no locking. Two writers doing load-modify-save at the same time
lose one of the updates (last write wins); the tool assumes one user
process per state file.
"""
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from finwise.models import AppState, utc_now
from finwise.utils.logger import get_logger
from finwise.utils.exceptions import StorageError

logger = get_logger()


class StateRepository(ABC):
    """Load and save the complete application state."""

    @abstractmethod
    def load(self) -> AppState:
        """Return the stored state, or a default state when none is stored."""

    @abstractmethod
    def save(self, state: AppState) -> None:
        """Replace the stored state."""

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored state."""


class JsonFileRepository(StateRepository):
    """Stores the state as one JSON document on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> AppState:
        if not self.path.exists():
            return AppState()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return AppState.model_validate_json(f.read())
        except (OSError, ValidationError) as e:
            logger.error(f"Failed to load app state from {self.path}: {e}")
            self._keep_corrupt_copy()
            return AppState()

    def _keep_corrupt_copy(self) -> None:
        backup = self.path.with_name(self.path.name + ".corrupt")
        try:
            shutil.copy2(self.path, backup)
            logger.warning(f"Kept unreadable state as {backup}")
        except OSError as e:
            logger.error(f"Failed to back up unreadable state {self.path}: {e}")

    def save(self, state: AppState) -> None:
        state.last_updated = utc_now()
        payload = state.model_dump_json(by_alias=True, exclude_none=True, indent=2)

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".state-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            logger.error(f"Failed to save app state to {self.path}: {e}")
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Failed to save app state: {e}")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class InMemoryRepository(StateRepository):
    """Keeps the serialized document in memory; every load returns a fresh copy."""

    def __init__(self, state: Optional[AppState] = None):
        self._document: Optional[str] = None
        if state is not None:
            self.save(state)

    def load(self) -> AppState:
        if self._document is None:
            return AppState()
        return AppState.model_validate_json(self._document)

    def save(self, state: AppState) -> None:
        state.last_updated = utc_now()
        self._document = state.model_dump_json(by_alias=True, exclude_none=True)

    def clear(self) -> None:
        self._document = None
