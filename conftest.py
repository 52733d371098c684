"""Shared pytest fixtures."""
import pytest

from simulation.aws_mock import MockAWSClients
from simulation.event_simulator import DESTINATION_BUCKET
from src.converter.processor import ConversionContext, NotificationProcessor
from src.storage.s3_store import S3ObjectStore


@pytest.fixture
def aws_client():
    return MockAWSClients()


@pytest.fixture
def store(aws_client):
    return S3ObjectStore(aws_client.get_s3_client())


@pytest.fixture
def conversion_context(store):
    return ConversionContext(store=store, destination_bucket=DESTINATION_BUCKET)


@pytest.fixture
def processor(conversion_context):
    return NotificationProcessor(conversion_context)
