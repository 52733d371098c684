"""Per-notification processing outcomes and batch aggregation."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any, List, Optional

from src.models.notification import ChangeNotification


class NotificationState(str, Enum):
    """Processing states for one notification"""
    RECEIVED = "RECEIVED"
    FETCHED = "FETCHED"
    PARSED = "PARSED"

    # Terminal states
    EMPTY_SKIPPED = "EMPTY_SKIPPED"
    DUPLICATE_SKIPPED = "DUPLICATE_SKIPPED"
    WRITTEN = "WRITTEN"
    FAILED = "FAILED"


TERMINAL_STATES = frozenset({
    NotificationState.EMPTY_SKIPPED,
    NotificationState.DUPLICATE_SKIPPED,
    NotificationState.WRITTEN,
    NotificationState.FAILED,
})


@dataclass
class ProcessingOutcome:
    """Where a notification ended up and why"""
    notification: ChangeNotification
    state: NotificationState = NotificationState.RECEIVED
    destination_key: Optional[str] = None
    records: int = 0
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    retryable: bool = False

    @property
    def failed(self) -> bool:
        return self.state == NotificationState.FAILED

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "bucket": self.notification.bucket,
            "key": self.notification.key,
            "destination_key": self.destination_key,
            "state": self.state.value,
            "records": self.records,
        }
        if self.error_code:
            result["error"] = {
                "code": self.error_code,
                "message": self.error_message,
                "retryable": self.retryable,
            }
        return result


@dataclass
class BatchResult:
    """Aggregated outcomes for all notifications of one invocation"""
    outcomes: List[ProcessingOutcome] = field(default_factory=list)
    invalid: List[str] = field(default_factory=list)  # messages for unparseable records

    def count(self, state: NotificationState) -> int:
        return sum(1 for outcome in self.outcomes if outcome.state == state)

    @property
    def failed(self) -> List[ProcessingOutcome]:
        return [outcome for outcome in self.outcomes if outcome.failed]

    @property
    def retryable_failures(self) -> List[ProcessingOutcome]:
        """Failures caused by the object store, which a redelivery may fix"""
        return [outcome for outcome in self.failed if outcome.retryable]

    def summary(self) -> Dict[str, Any]:
        return {
            "total": len(self.outcomes),
            "written": self.count(NotificationState.WRITTEN),
            "duplicate_skipped": self.count(NotificationState.DUPLICATE_SKIPPED),
            "empty_skipped": self.count(NotificationState.EMPTY_SKIPPED),
            "failed": len(self.failed),
            "invalid": len(self.invalid),
            "timestamp": datetime.utcnow().isoformat(),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [outcome.to_dict() for outcome in self.outcomes],
            "invalid_records": list(self.invalid),
            "summary": self.summary(),
        }
