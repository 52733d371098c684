"""Environment-driven configuration for the converter."""
from dataclasses import dataclass
from typing import Mapping, Optional
import os


class ConfigurationError(Exception):
    """Configuration is present but unusable."""
    pass


class ConfigurationMissing(ConfigurationError):
    """A required setting is absent; the process must not start."""
    pass


_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _as_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _as_positive_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e
    if value < 1:
        raise ConfigurationError(f"{name} must be at least 1, got {value}")
    return value


@dataclass(frozen=True)
class ConverterConfig:
    destination_bucket: str
    region: Optional[str] = None
    max_workers: int = 4
    conditional_writes: bool = True
    raise_on_store_failure: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ConverterConfig":
        """Build from environment variables; DEST_BUCKET is mandatory."""
        environ = os.environ if environ is None else environ

        destination_bucket = (environ.get("DEST_BUCKET") or "").strip()
        if not destination_bucket:
            raise ConfigurationMissing("DEST_BUCKET env var must be set to the destination bucket name")

        log_level = (environ.get("LOG_LEVEL") or "INFO").strip().upper()
        if log_level not in _LOG_LEVELS:
            raise ConfigurationError(f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}, got {log_level!r}")

        return cls(
            destination_bucket=destination_bucket,
            region=environ.get("AWS_REGION") or None,
            max_workers=_as_positive_int(environ, "MAX_WORKERS", 4),
            conditional_writes=_as_bool(environ, "CONDITIONAL_WRITES", True),
            raise_on_store_failure=_as_bool(environ, "RAISE_ON_STORE_FAILURE", True),
            log_level=log_level,
        )
