"""Lambda entry point for the CEF to JSON converter.

Configuration is resolved at import time so a missing DEST_BUCKET fails the
cold start instead of individual invocations.
"""
import logging
from typing import Dict, Any

from .config import ConverterConfig
from .handler import build_context, handle_event

CONFIG = ConverterConfig.from_env()

logger = logging.getLogger()
logger.setLevel(CONFIG.log_level)


def lambda_handler(event: Dict[str, Any], context) -> Dict[str, Any]:
    """Lambda handler for S3 ObjectCreated notifications."""
    request_id = getattr(context, "aws_request_id", "local")
    logger.info(f"Invocation {request_id} writing to bucket {CONFIG.destination_bucket}")
    return handle_event(event, build_context(CONFIG), CONFIG.raise_on_store_failure)
