"""Object-change notifications delivered by the storage trigger."""
from dataclasses import dataclass
from typing import Dict, Any, Optional
from urllib.parse import unquote_plus

from src.conversion.errors import InvalidNotification


@dataclass(frozen=True)
class ChangeNotification:
    """One unit of work: a source object that was created or overwritten"""
    bucket: str
    key: str
    event_time: str = ""
    event_name: str = ""
    event_source: str = ""  # e.g., "aws:s3"
    size: Optional[int] = None

    @classmethod
    def from_s3_record(cls, record: Dict[str, Any]) -> "ChangeNotification":
        """Create from a single entry of an S3 event's Records list"""
        s3 = record.get("s3") or {}
        bucket = (s3.get("bucket") or {}).get("name")
        obj = s3.get("object") or {}
        key = obj.get("key")

        if not bucket or not key:
            raise InvalidNotification(
                f"S3 record is missing bucket or object key: {record.get('eventName', '<unknown event>')}"
            )

        # Keys arrive URL-encoded ("+" for spaces)
        return cls(
            bucket=bucket,
            key=unquote_plus(key),
            event_time=record.get("eventTime", ""),
            event_name=record.get("eventName", ""),
            event_source=record.get("eventSource", ""),
            size=obj.get("size"),
        )

    def describe(self) -> str:
        return f"s3://{self.bucket}/{self.key}"
