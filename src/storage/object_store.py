"""Object store abstraction used by the conversion pipeline."""
from abc import ABC, abstractmethod


class ObjectStoreError(Exception):
    """Any object store failure."""

    def __init__(self, message: str, bucket: str = "", key: str = "", code: str = ""):
        super().__init__(message)
        self.bucket = bucket
        self.key = key
        self.code = code


class ObjectNotFound(ObjectStoreError):
    """No object at the requested key."""
    pass


class ObjectAlreadyExists(ObjectStoreError):
    """A create-only write found an object already at the key."""
    pass


class ObjectStore(ABC):
    """Read, existence-check and write operations on a bucket/key store."""

    @abstractmethod
    def read(self, bucket: str, key: str) -> bytes:
        """Return the object body. Raises ObjectNotFound or ObjectStoreError."""
        pass

    @abstractmethod
    def exists(self, bucket: str, key: str) -> bool:
        """Report whether an object is present.

        Only a not-found answer means False; every other failure raises
        ObjectStoreError.
        """
        pass

    @abstractmethod
    def write(self, bucket: str, key: str, body: bytes, content_type: str,
              create_only: bool = False) -> None:
        """Store the full body at key.

        With create_only the write must not replace an existing object and
        raises ObjectAlreadyExists instead.
        """
        pass
