"""Newline-delimited JSON serialization and write-back."""
from typing import List, Sequence
import logging

from src.models.audit_record import AuditRecord
from .object_store import ObjectStore

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/json"


def serialize_records(records: Sequence[AuditRecord]) -> bytes:
    """One JSON document per line, each line newline-terminated."""
    lines: List[str] = [record.to_json() for record in records]
    return "".join(f"{line}\n" for line in lines).encode("utf-8")


class BatchWriter:
    """Writes a converted batch as a single object.

    A single PutObject call is all-or-nothing on S3, so no partial document is
    ever visible at the destination key.
    """

    def __init__(self, store: ObjectStore, destination_bucket: str, create_only: bool = True):
        self.store = store
        self.destination_bucket = destination_bucket
        self.create_only = create_only

    def write(self, records: Sequence[AuditRecord], destination_key: str) -> int:
        """Serialize and store records; returns the number of bytes written.

        Raises ObjectAlreadyExists when create_only is set and the key is taken,
        ObjectStoreError for any other store failure.
        """
        body = serialize_records(records)
        logger.info(
            f"Writing {len(records)} record(s) to s3://{self.destination_bucket}/{destination_key}"
        )
        self.store.write(
            self.destination_bucket,
            destination_key,
            body,
            CONTENT_TYPE,
            create_only=self.create_only,
        )
        return len(body)
