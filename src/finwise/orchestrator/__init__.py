from .status import ProcessingStatus, Stage, StatusChannel, transition
from .processor import AgentOrchestrator, ProcessingOutcome

__all__ = [
    "AgentOrchestrator",
    "ProcessingOutcome",
    "ProcessingStatus",
    "Stage",
    "StatusChannel",
    "transition",
]
