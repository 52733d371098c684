"""Event handling for the CEF to JSON converter."""
import json
import logging
from typing import Dict, Any, List, Optional, Tuple

from src.conversion.errors import BatchConversionError, InvalidNotification
from src.models.notification import ChangeNotification
from src.models.outcome import BatchResult
from src.storage.object_store import ObjectStore
from src.storage.s3_store import S3ObjectStore, get_s3_client
from .config import ConverterConfig
from .processor import ConversionContext, NotificationProcessor

logger = logging.getLogger(__name__)


def build_context(config: ConverterConfig, store: Optional[ObjectStore] = None) -> ConversionContext:
    """Build the per-invocation context; defaults to S3 for the configured region."""
    if store is None:
        store = S3ObjectStore(get_s3_client(config.region))

    return ConversionContext(
        store=store,
        destination_bucket=config.destination_bucket,
        conditional_writes=config.conditional_writes,
        max_workers=config.max_workers,
    )


def parse_notifications(event: Dict[str, Any]) -> Tuple[List[ChangeNotification], List[str]]:
    """Parse S3 event records. Returns (notifications, messages for invalid records)."""
    notifications: List[ChangeNotification] = []
    invalid: List[str] = []

    for index, record in enumerate(event.get("Records") or []):
        try:
            notifications.append(ChangeNotification.from_s3_record(record))
        except InvalidNotification as e:
            logger.error(f"Failed to parse notification record {index}: {e}")
            invalid.append(f"record {index}: {e}")

    return notifications, invalid


def handle_event(event: Dict[str, Any], conversion_context: ConversionContext,
                 raise_on_store_failure: bool = True) -> Dict[str, Any]:
    """Convert every object referenced by an S3 event.

    Each notification is processed on its own. When any of them failed on an
    object store error and raise_on_store_failure is set, BatchConversionError
    is raised after the whole batch ran so the trigger redelivers the event;
    objects already converted are skipped on the retry.
    """
    logger.info("Processing s3 event notifications")
    logger.debug(f"Received event: {json.dumps(event, default=str)}")

    notifications, invalid = parse_notifications(event)
    if not notifications and not invalid:
        logger.warning("No notification records found in event")
        return {
            "statusCode": 200,
            "body": json.dumps({"message": "No notifications to process"})
        }

    processor = NotificationProcessor(conversion_context)
    result = processor.process_batch(notifications)
    result.invalid.extend(invalid)

    body = result.to_dict()
    logger.info(f"Processed {len(notifications)} notification(s): {json.dumps(body['summary'])}")

    retryable = result.retryable_failures
    if retryable and raise_on_store_failure:
        keys = ", ".join(outcome.notification.key for outcome in retryable)
        raise BatchConversionError(
            f"{len(retryable)} notification(s) failed on store errors: {keys}", body
        )

    return {
        "statusCode": 207 if (result.failed or result.invalid) else 200,
        "body": json.dumps(body)
    }


def local_test(event: Dict[str, Any], store: ObjectStore, destination_bucket: str,
               max_workers: int = 1) -> Dict[str, Any]:
    """Run the handler locally against any ObjectStore."""
    logger.info(f"Testing conversion locally into bucket {destination_bucket}")
    config = ConverterConfig(destination_bucket=destination_bucket, max_workers=max_workers)
    return handle_event(event, build_context(config, store), raise_on_store_failure=False)
