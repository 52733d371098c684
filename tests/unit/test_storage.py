"""Unit tests for the object store, idempotency guard and batch writer."""
import json

import pytest
from botocore.exceptions import EndpointConnectionError

from src.conversion.cef_parser import parse_lines
from src.storage.batch_writer import BatchWriter, CONTENT_TYPE, serialize_records
from src.storage.idempotency import IdempotencyGuard, ProbeResult
from src.storage.object_store import ObjectStoreError, ObjectNotFound, ObjectAlreadyExists
from simulation.event_simulator import SAMPLE_LINES, DESTINATION_BUCKET


def test_read_existing_object(aws_client, store):
    """Test that the object body is returned as bytes."""
    aws_client.put("src", "a.ceff", b"payload")
    assert store.read("src", "a.ceff") == b"payload"


def test_read_missing_object(store):
    """Test that NoSuchKey maps to ObjectNotFound."""
    with pytest.raises(ObjectNotFound):
        store.read("src", "missing.ceff")


def test_read_connection_failure(store, mocker):
    """Test that transport errors surface as generic store errors."""
    mocker.patch.object(
        store.client, "get_object",
        side_effect=EndpointConnectionError(endpoint_url="https://s3.amazonaws.com"),
    )

    with pytest.raises(ObjectStoreError) as exc_info:
        store.read("src", "a.ceff")
    assert not isinstance(exc_info.value, ObjectNotFound)


def test_exists(aws_client, store):
    """Test that a 404 from HeadObject means absent."""
    assert store.exists("dst", "a.json") is False
    aws_client.put("dst", "a.json", b"{}")
    assert store.exists("dst", "a.json") is True


def test_exists_access_denied_is_not_absent(aws_client, store):
    """Test that errors other than not-found propagate from exists."""
    aws_client.inject_error("HeadObject", "dst", "a.json", "403", 403)

    with pytest.raises(ObjectStoreError) as exc_info:
        store.exists("dst", "a.json")
    assert exc_info.value.code == "403"


def test_create_only_write(aws_client, store):
    """Test that create-only writes never replace an existing object."""
    store.write("dst", "a.json", b"first", CONTENT_TYPE, create_only=True)

    with pytest.raises(ObjectAlreadyExists):
        store.write("dst", "a.json", b"second", CONTENT_TYPE, create_only=True)
    assert aws_client.get("dst", "a.json") == b"first"

    store.write("dst", "a.json", b"third", CONTENT_TYPE)
    assert aws_client.get("dst", "a.json") == b"third"


def test_write_failure(aws_client, store):
    """Test that a server error on PutObject is a store error."""
    aws_client.inject_error("PutObject", "dst", "a.json", "InternalError", 500)

    with pytest.raises(ObjectStoreError) as exc_info:
        store.write("dst", "a.json", b"x", CONTENT_TYPE)
    assert not isinstance(exc_info.value, ObjectAlreadyExists)
    assert aws_client.get("dst", "a.json") is None


def test_idempotency_guard_states(aws_client, store):
    """Test the exists / absent / probe-failed outcomes."""
    guard = IdempotencyGuard(store, DESTINATION_BUCKET)

    assert guard.probe("a.json").result == ProbeResult.ABSENT

    aws_client.put(DESTINATION_BUCKET, "a.json", b"{}")
    assert guard.probe("a.json").result == ProbeResult.EXISTS

    aws_client.inject_error("HeadObject", DESTINATION_BUCKET, "b.json", "SlowDown", 503)
    outcome = guard.probe("b.json")
    assert outcome.result == ProbeResult.PROBE_FAILED
    assert isinstance(outcome.error, ObjectStoreError)


def test_serialize_records():
    """Test one newline-terminated JSON document per record, in order."""
    records = parse_lines(SAMPLE_LINES)
    body = serialize_records(records)

    lines = body.decode("utf-8").split("\n")
    assert lines[-1] == ""
    assert len(lines) == 3
    assert [json.loads(line)["raw"] for line in lines[:2]] == SAMPLE_LINES


def test_batch_writer(aws_client, store):
    """Test that the batch is written once with the JSON content type."""
    writer = BatchWriter(store, DESTINATION_BUCKET)
    written = writer.write(parse_lines(SAMPLE_LINES), "2023-02-14_14.json")

    puts = aws_client.calls("PutObject")
    assert len(puts) == 1
    assert puts[0]["parameters"]["ContentType"] == "application/json"
    assert puts[0]["parameters"]["IfNoneMatch"] == "*"
    assert written == len(aws_client.get(DESTINATION_BUCKET, "2023-02-14_14.json"))


def test_batch_writer_without_conditional_writes(aws_client, store):
    """Test that plain overwrites are used when create-only writes are disabled."""
    writer = BatchWriter(store, DESTINATION_BUCKET, create_only=False)
    writer.write(parse_lines(SAMPLE_LINES[:1]), "a.json")

    assert aws_client.calls("PutObject")[0]["parameters"]["IfNoneMatch"] is None
