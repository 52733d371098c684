"""Notification processor: read -> dedupe -> split -> parse -> write."""
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Sequence
import logging

from src.conversion.cef_parser import parse_lines
from src.conversion.content import decode_content, split_lines
from src.conversion.errors import ConversionError, FetchFailed, ProbeFailed, WriteFailed
from src.conversion.keys import derive_destination_key
from src.models.notification import ChangeNotification
from src.models.outcome import BatchResult, NotificationState, ProcessingOutcome
from src.storage.batch_writer import BatchWriter
from src.storage.idempotency import IdempotencyGuard, ProbeResult
from src.storage.object_store import ObjectStore, ObjectStoreError, ObjectAlreadyExists

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionContext:
    """Everything one invocation needs, passed explicitly to each component"""
    store: ObjectStore
    destination_bucket: str
    conditional_writes: bool = True
    max_workers: int = 1


class NotificationProcessor:
    """Converts the source object behind each notification into NDJSON."""

    def __init__(self, context: ConversionContext):
        self.context = context
        self.guard = IdempotencyGuard(context.store, context.destination_bucket)
        self.writer = BatchWriter(
            context.store,
            context.destination_bucket,
            create_only=context.conditional_writes,
        )

    def process(self, notification: ChangeNotification) -> ProcessingOutcome:
        """Process one notification. Never raises; failures land in the outcome."""
        outcome = ProcessingOutcome(notification=notification)
        logger.info(
            f"[{notification.event_source} - {notification.event_time}] "
            f"Processing {notification.event_name or 'notification'} for {notification.describe()}"
        )

        try:
            self._convert(notification, outcome)
        except ConversionError as e:
            self._fail(outcome, e.code, str(e), e.retryable)
        except Exception as e:
            logger.error(f"Unexpected error converting {notification.describe()}: {str(e)}", exc_info=True)
            self._fail(outcome, "InternalError", str(e), True)

        return outcome

    def process_batch(self, notifications: Sequence[ChangeNotification]) -> BatchResult:
        """Process notifications independently; one failure never stops the others."""
        workers = min(self.context.max_workers, len(notifications))
        if workers <= 1:
            outcomes: List[ProcessingOutcome] = [self.process(n) for n in notifications]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                outcomes = list(executor.map(self.process, notifications))

        result = BatchResult(outcomes=outcomes)
        logger.info(
            f"Batch completed: {result.count(NotificationState.WRITTEN)} written, "
            f"{result.count(NotificationState.DUPLICATE_SKIPPED)} duplicate, "
            f"{result.count(NotificationState.EMPTY_SKIPPED)} empty, {len(result.failed)} failed"
        )
        return result

    def _convert(self, notification: ChangeNotification, outcome: ProcessingOutcome):
        store = self.context.store

        try:
            body = store.read(notification.bucket, notification.key)
        except ObjectStoreError as e:
            raise FetchFailed(f"could not read {notification.describe()}: {e}") from e
        outcome.state = NotificationState.FETCHED

        if len(body) == 0:
            logger.info(f"Audit log {notification.describe()} is empty. No action processed")
            outcome.state = NotificationState.EMPTY_SKIPPED
            return

        destination_key = derive_destination_key(notification.key)
        outcome.destination_key = destination_key

        probe = self.guard.probe(destination_key)
        if probe.result == ProbeResult.PROBE_FAILED:
            raise ProbeFailed(f"could not check for existing {destination_key}: {probe.error}") from probe.error
        if probe.result == ProbeResult.EXISTS:
            logger.info(f"Possibly duplicate notification, {destination_key} already exists. Ignoring")
            outcome.state = NotificationState.DUPLICATE_SKIPPED
            return

        records = parse_lines(split_lines(decode_content(body)))
        outcome.state = NotificationState.PARSED

        if not records:
            logger.info(f"Audit log {notification.describe()} has no events. No action processed")
            outcome.state = NotificationState.EMPTY_SKIPPED
            return

        try:
            self.writer.write(records, destination_key)
        except ObjectAlreadyExists:
            # Lost the race against a concurrent delivery of the same object
            logger.info(f"{destination_key} was written concurrently. Ignoring duplicate")
            outcome.state = NotificationState.DUPLICATE_SKIPPED
            return
        except ObjectStoreError as e:
            raise WriteFailed(f"could not write {destination_key}: {e}") from e

        outcome.records = len(records)
        outcome.state = NotificationState.WRITTEN
        logger.info(
            f"Successfully wrote {destination_key} to bucket {self.context.destination_bucket} "
            f"({len(records)} records)"
        )

    def _fail(self, outcome: ProcessingOutcome, code: str, message: str, retryable: bool):
        outcome.state = NotificationState.FAILED
        outcome.error_code = code
        outcome.error_message = message
        outcome.retryable = retryable
        logger.error(f"Conversion of {outcome.notification.describe()} failed [{code}]: {message}")
