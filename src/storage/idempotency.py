"""Duplicate-notification guard based on destination object existence.

The probe is best effort: two concurrent invocations for the same source key
can both see ABSENT. The create-only write in BatchWriter closes that gap
where the store supports it.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging

from .object_store import ObjectStore, ObjectStoreError

logger = logging.getLogger(__name__)


class ProbeResult(str, Enum):
    EXISTS = "EXISTS"
    ABSENT = "ABSENT"
    PROBE_FAILED = "PROBE_FAILED"


@dataclass(frozen=True)
class ProbeOutcome:
    result: ProbeResult
    error: Optional[ObjectStoreError] = None


class IdempotencyGuard:
    """Checks whether a conversion output already exists."""

    def __init__(self, store: ObjectStore, destination_bucket: str):
        self.store = store
        self.destination_bucket = destination_bucket

    def probe(self, destination_key: str) -> ProbeOutcome:
        """Tri-state existence check; store errors are never reported as ABSENT."""
        try:
            exists = self.store.exists(self.destination_bucket, destination_key)
        except ObjectStoreError as e:
            logger.error(f"Existence probe failed for s3://{self.destination_bucket}/{destination_key}: {e}")
            return ProbeOutcome(ProbeResult.PROBE_FAILED, e)

        return ProbeOutcome(ProbeResult.EXISTS if exists else ProbeResult.ABSENT)
