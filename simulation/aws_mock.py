"""Mock AWS SDK for local simulation and call logging."""
from typing import Dict, Any, Optional, Tuple
from datetime import datetime
import io
import json
import threading

from botocore.exceptions import ClientError
from botocore.response import StreamingBody


def client_error(operation: str, code: str, status: int, message: str = "") -> ClientError:
    """Build a ClientError shaped like the ones botocore raises"""
    return ClientError(
        {
            "Error": {"Code": code, "Message": message or code},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


class MockS3Client:
    """In-memory S3 client implementing the calls the converter makes"""

    def __init__(self, parent: "MockAWSClients"):
        self.parent = parent

    def get_object(self, Bucket: str, Key: str, **kwargs):
        self.parent.log_call("s3", "GetObject", {"Bucket": Bucket, "Key": Key})
        self.parent.raise_injected("GetObject", Bucket, Key)
        obj = self.parent.objects.get((Bucket, Key))
        if obj is None:
            raise client_error("GetObject", "NoSuchKey", 404, "The specified key does not exist.")
        body = obj["Body"]
        return {
            "Body": StreamingBody(io.BytesIO(body), len(body)),
            "ContentLength": len(body),
            "ContentType": obj["ContentType"],
        }

    def head_object(self, Bucket: str, Key: str, **kwargs):
        self.parent.log_call("s3", "HeadObject", {"Bucket": Bucket, "Key": Key})
        self.parent.raise_injected("HeadObject", Bucket, Key)
        obj = self.parent.objects.get((Bucket, Key))
        if obj is None:
            # HEAD responses carry no body, so botocore only sees the status
            raise client_error("HeadObject", "404", 404, "Not Found")
        return {
            "ContentLength": len(obj["Body"]),
            "ContentType": obj["ContentType"],
            "ResponseMetadata": {"HTTPStatusCode": 200},
        }

    def put_object(self, Bucket: str, Key: str, Body: Any, ContentType: str = "binary/octet-stream",
                   IfNoneMatch: Optional[str] = None, **kwargs):
        data = Body.encode("utf-8") if isinstance(Body, str) else bytes(Body)
        self.parent.log_call("s3", "PutObject", {
            "Bucket": Bucket,
            "Key": Key,
            "ContentType": ContentType,
            "IfNoneMatch": IfNoneMatch,
            "ContentLength": len(data),
        })
        self.parent.raise_injected("PutObject", Bucket, Key)

        with self.parent.lock:
            if IfNoneMatch == "*" and (Bucket, Key) in self.parent.objects:
                raise client_error(
                    "PutObject", "PreconditionFailed", 412,
                    "At least one of the pre-conditions you specified did not hold",
                )
            self.parent.objects[(Bucket, Key)] = {"Body": data, "ContentType": ContentType}

        return {"ResponseMetadata": {"HTTPStatusCode": 200}}


class MockAWSClients:
    """Mock AWS service clients backed by an in-memory object map"""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.logs = []
        self.objects: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self.injected_errors: Dict[Tuple[str, str, str], ClientError] = {}
        self.lock = threading.Lock()

    def log_call(self, service: str, operation: str, params: Dict[str, Any]):
        """Record an API call"""
        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "service": service,
            "operation": operation,
            "parameters": params,
        }
        with self.lock:
            self.logs.append(log_entry)
        if self.verbose:
            print(f"[MOCK AWS] {service}.{operation} called with params: {json.dumps(params, default=str)}")

    def inject_error(self, operation: str, bucket: str, key: str, code: str, status: int):
        """Make every matching call fail with a ClientError"""
        self.injected_errors[(operation, bucket, key)] = client_error(operation, code, status)

    def raise_injected(self, operation: str, bucket: str, key: str):
        error = self.injected_errors.get((operation, bucket, key))
        if error is not None:
            raise error

    def put(self, bucket: str, key: str, body: bytes, content_type: str = "text/plain"):
        """Seed an object without logging a call"""
        self.objects[(bucket, key)] = {"Body": body, "ContentType": content_type}

    def get(self, bucket: str, key: str) -> Optional[bytes]:
        obj = self.objects.get((bucket, key))
        return obj["Body"] if obj else None

    def get_s3_client(self) -> MockS3Client:
        """Mock S3 client"""
        return MockS3Client(self)

    def calls(self, operation: str) -> list:
        return [log for log in self.logs if log["operation"] == operation]

    def get_logs(self) -> list:
        """Get all logged calls"""
        return self.logs

    def clear_logs(self):
        """Clear call logs"""
        self.logs = []
