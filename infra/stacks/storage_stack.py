"""Audit log storage stack: CEF source bucket, JSON destination bucket."""
from aws_cdk import (
    Stack,
    RemovalPolicy,
    aws_iam as iam,
    aws_s3 as s3,
    CfnOutput,
)
from constructs import Construct


class StorageStack(Stack):
    """Buckets for raw CEF audit logs and their JSON conversions."""

    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Get context values
        environment = self.node.try_get_context("environment") or "dev"
        log_path = self.node.try_get_context("log_path") or "pulumi-audit-logs"
        source_account_id = self.node.try_get_context("source_account_id") or "058607598222"
        external_id = self.node.try_get_context("export_external_id") or "cef-audit-export"
        existing_bucket_name = self.node.try_get_context("cef_bucket_name")

        is_prod = environment == "prod"
        self.removal_policy = RemovalPolicy.RETAIN if is_prod else RemovalPolicy.DESTROY

        # Bring your own bucket if the producer already exports to one
        self.export_role = None
        if existing_bucket_name:
            cef_bucket = s3.Bucket.from_bucket_name(self, "CefAuditLogs", existing_bucket_name)
        else:
            cef_bucket = self._create_bucket("CefAuditLogs", is_prod)

            # Role the log producer assumes to export into <log_path>/
            export_role = iam.Role(
                self, "AuditLogExportRole",
                assumed_by=iam.AccountPrincipal(source_account_id),
                external_ids=[external_id],
                description="Role for the audit log producer to export CEF logs to S3",
            )
            cef_bucket.grant_put(export_role, f"{log_path}/*")
            export_role.add_to_policy(
                iam.PolicyStatement(
                    actions=["s3:GetBucketLocation"],
                    resources=[cef_bucket.bucket_arn],
                )
            )
            self.export_role = export_role

            CfnOutput(self, "ExportRoleArn",
                      value=export_role.role_arn,
                      description="Role assumed by the audit log producer")

        json_bucket = self._create_bucket("JsonAuditLogs", is_prod)

        # Store references as properties
        self.cef_bucket = cef_bucket
        self.json_bucket = json_bucket
        self.log_path = log_path

        # Outputs
        CfnOutput(self, "CefBucketArn",
                  value=cef_bucket.bucket_arn,
                  description="Source bucket receiving CEF audit logs")

        CfnOutput(self, "JsonBucketArn",
                  value=json_bucket.bucket_arn,
                  description="Destination bucket for converted JSON audit logs")

        CfnOutput(self, "AuditLogPath",
                  value=log_path,
                  description="Prefix the producer writes audit logs under")

    def _create_bucket(self, construct_id: str, is_prod: bool) -> s3.Bucket:
        return s3.Bucket(
            self, construct_id,
            encryption=s3.BucketEncryption.S3_MANAGED,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            enforce_ssl=True,
            removal_policy=self.removal_policy,
            auto_delete_objects=not is_prod,
        )
