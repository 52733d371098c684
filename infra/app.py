"""CEF audit log converter CDK application."""
import os
from aws_cdk import App, Environment

from stacks.storage_stack import StorageStack
from stacks.converter_stack import ConverterStack

app = App()

# Get context values
account = app.node.try_get_context("account") or os.environ.get("CDK_DEFAULT_ACCOUNT", "123456789012")
region = app.node.try_get_context("region") or os.environ.get("CDK_DEFAULT_REGION", "us-east-1")
environment = app.node.try_get_context("environment") or "dev"

# Create environment object
env = Environment(account=account, region=region)

print(f"Deploying CEF audit log converter to {account}/{region} in {environment} environment")

storage_stack = StorageStack(
    app, f"CefAuditStorage-{environment}",
    env=env,
    description="CEF audit log source and JSON destination buckets"
)

converter_stack = ConverterStack(
    app, f"CefAuditConverter-{environment}",
    storage_stack=storage_stack,
    env=env,
    description="Converts CEF audit logs to newline-delimited JSON"
)

# Add tags to all resources
for stack in [storage_stack, converter_stack]:
    tags = stack.tags
    tags.set_tag("Project", "CefAuditConverter")
    tags.set_tag("Environment", environment)
    tags.set_tag("ManagedBy", "CDK")
    tags.set_tag("Owner", "SecurityEngineering")

app.synth()
