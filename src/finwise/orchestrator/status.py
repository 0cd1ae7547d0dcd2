"""Pipeline stages and the status channel that reports them."""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional

from finwise.utils.logger import get_logger
from finwise.utils.exceptions import InvalidTransitionError

logger = get_logger()


class Stage(str, Enum):
    IDLE = "idle"
    PARSING = "parsing"
    CLASSIFYING = "classifying"
    ANALYZING = "analyzing"
    RECOMMENDING = "recommending"
    COMPLETED = "completed"
    ERROR = "error"


_ORDER = [Stage.IDLE, Stage.PARSING, Stage.CLASSIFYING, Stage.ANALYZING, Stage.RECOMMENDING, Stage.COMPLETED]
TERMINAL_STAGES = frozenset({Stage.COMPLETED, Stage.ERROR})


def transition(current: Stage, target: Stage) -> Stage:
    """Validate a stage change.

    Stages only move forward (staying in the same stage is allowed, for
    sub-tasks). ``error`` is reachable from every non-terminal stage; nothing
    leaves a terminal stage.
    """
    if current in TERMINAL_STAGES:
        raise InvalidTransitionError(f"Cannot leave terminal stage '{current.value}'")
    if target == Stage.ERROR:
        return target
    if _ORDER.index(target) < _ORDER.index(current):
        raise InvalidTransitionError(f"Cannot move back from '{current.value}' to '{target.value}'")
    return target


@dataclass(frozen=True)
class ProcessingStatus:
    stage: Stage
    progress: int
    message: str
    current_task: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"stage": self.stage.value, "progress": self.progress, "message": self.message}
        if self.current_task is not None:
            data["currentTask"] = self.current_task
        return data


Subscriber = Callable[[ProcessingStatus], None]


class StatusChannel:
    """One-way channel of status events with a recorded history."""

    def __init__(self):
        self._subscribers: List[Subscriber] = []
        self._history: List[ProcessingStatus] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def current(self) -> ProcessingStatus:
        if self._history:
            return self._history[-1]
        return ProcessingStatus(Stage.IDLE, 0, "Ready")

    @property
    def history(self) -> List[ProcessingStatus]:
        return list(self._history)

    def publish(self, stage: Stage, progress: int, message: str, current_task: Optional[str] = None) -> ProcessingStatus:
        """Validate the transition, record the event and notify subscribers in order."""
        transition(self.current.stage, stage)
        status = ProcessingStatus(stage, progress, message, current_task)
        self._history.append(status)
        logger.debug(f"Status: {stage.value} {progress}% - {message}")

        for callback in list(self._subscribers):
            callback(status)
        return status

    def reset(self) -> None:
        """Start a fresh run; subscribers are kept."""
        self._history.clear()

    def __iter__(self) -> Iterator[ProcessingStatus]:
        return iter(self.history)

    def __len__(self) -> int:
        return len(self._history)
