"""CEF to JSON converter stack."""
from pathlib import Path

from aws_cdk import (
    Stack,
    Duration,
    aws_lambda as lambda_,
    aws_logs as logs,
    aws_s3 as s3,
    aws_s3_notifications as s3n,
    CfnOutput,
)
from constructs import Construct

PROJECT_ROOT = Path(__file__).resolve().parents[2]

ASSET_EXCLUDES = [
    "infra",
    "tests",
    "simulation",
    "cdk.out",
    ".venv",
    ".git",
    "**/__pycache__",
    "*.md",
    "*.txt",
    "*.egg-info",
]


class ConverterStack(Stack):
    """Lambda converting new CEF objects into newline-delimited JSON."""

    def __init__(self, scope: Construct, construct_id: str,
                 storage_stack, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Get context
        environment = self.node.try_get_context("environment") or "dev"
        source_suffix = self.node.try_get_context("source_suffix") or ".ceff"
        max_workers = str(self.node.try_get_context("max_workers") or 4)

        # Import buckets by name so the notification wiring lives in this stack
        # and no dependency cycle forms back into StorageStack
        cef_bucket = s3.Bucket.from_bucket_name(
            self, "CefBucket", storage_stack.cef_bucket.bucket_name
        )
        json_bucket = s3.Bucket.from_bucket_name(
            self, "JsonBucket", storage_stack.json_bucket.bucket_name
        )

        converter_lambda = lambda_.Function(
            self, "CefToJsonLambda",
            runtime=lambda_.Runtime.PYTHON_3_11,
            handler="src.converter.lambda_function.lambda_handler",
            code=lambda_.Code.from_asset(str(PROJECT_ROOT), exclude=ASSET_EXCLUDES),
            timeout=Duration.seconds(60),
            memory_size=256,
            retry_attempts=2,
            environment={
                "DEST_BUCKET": json_bucket.bucket_name,
                "MAX_WORKERS": max_workers,
                "CONDITIONAL_WRITES": "true",
                "RAISE_ON_STORE_FAILURE": "true",
                "ENVIRONMENT": environment,
                "LOG_LEVEL": "INFO"
            },
            log_retention=logs.RetentionDays.ONE_MONTH,
        )

        # Read sources; HeadObject on the destination needs List to answer 404
        cef_bucket.grant_read(converter_lambda)
        json_bucket.grant_read_write(converter_lambda)

        # Only CEF exports trigger the converter
        cef_bucket.add_event_notification(
            s3.EventType.OBJECT_CREATED,
            s3n.LambdaDestination(converter_lambda),
            s3.NotificationKeyFilter(suffix=source_suffix),
        )

        # Store references
        self.converter_lambda = converter_lambda

        # Outputs
        CfnOutput(self, "ConverterLambdaArn",
                  value=converter_lambda.function_arn,
                  description="CEF to JSON converter Lambda ARN")
