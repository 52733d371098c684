"""Audit record model - the structured form of one CEF log line."""
from dataclasses import dataclass, field
from typing import Dict, Any
import json


@dataclass(frozen=True)
class AuditRecord:
    """Immutable record parsed from exactly one non-empty CEF line"""

    # Syslog-style prefix
    timestamp: str  # e.g., "Feb 14 14:53:01"
    host: str

    # CEF header fields
    version: str
    vendor: str
    product: str
    product_version: str
    event_class_id: str
    event_name: str
    severity: str

    # Unmodified input line, kept for replay
    raw: str

    # Extension key=value pairs
    data: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the published document shape (field names are part of the output contract)"""
        return {
            "timestamp": self.timestamp,
            "host": self.host,
            "data": dict(self.data),
            "vendor": self.vendor,
            "product": self.product,
            "productVersion": self.product_version,
            "eventClassId": self.event_class_id,
            "eventName": self.event_name,
            "eventSeverity": self.severity,
            "raw": self.raw,
            "version": self.version,
        }

    def to_json(self) -> str:
        """Serialize to a single compact JSON line"""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_dict(cls, item: Dict[str, Any]) -> "AuditRecord":
        """Create AuditRecord from a published document line"""
        return cls(
            timestamp=item["timestamp"],
            host=item["host"],
            version=item["version"],
            vendor=item["vendor"],
            product=item["product"],
            product_version=item["productVersion"],
            event_class_id=item["eventClassId"],
            event_name=item["eventName"],
            severity=item["eventSeverity"],
            raw=item["raw"],
            data=dict(item.get("data") or {}),
        )
