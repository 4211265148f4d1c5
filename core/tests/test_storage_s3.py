from __future__ import annotations

import io
from collections.abc import Iterator

import pytest
from botocore.response import StreamingBody
from botocore.stub import Stubber

from lfsgate_core.db.ids import sha256_hex
from lfsgate_core.db.objects import ObjectRow
from lfsgate_core.storage import ContentStoreError, object_key_for_oid
from lfsgate_core.storage.s3 import S3ContentStore

BUCKET = "lfsgate-test"


def _meta(data: bytes) -> ObjectRow:
    return ObjectRow(oid=sha256_hex(data), size=len(data), created_at="")


@pytest.fixture
def s3() -> Iterator[tuple[S3ContentStore, Stubber]]:
    store = S3ContentStore(
        endpoint_url="http://127.0.0.1:9000",
        access_key="test",
        secret_key="test",
        region="us-east-1",
        use_ssl=False,
        bucket=BUCKET,
    )
    with Stubber(store._get_client()) as stubber:
        yield store, stubber
        stubber.assert_no_pending_responses()


def test_delete_file_twice_succeeds(s3) -> None:
    store, stubber = s3
    oid = sha256_hex(b"payload")
    expected = {"Bucket": BUCKET, "Key": object_key_for_oid(oid)}

    stubber.add_response("delete_object", {}, expected)
    stubber.add_response("delete_object", {}, expected)

    store.delete_file(oid)
    store.delete_file(oid)


def test_delete_file_error_is_content_store_error(s3) -> None:
    store, stubber = s3
    oid = sha256_hex(b"payload")
    stubber.add_client_error(
        "delete_object", service_error_code="AccessDenied", http_status_code=403
    )

    with pytest.raises(ContentStoreError, match="failed to delete"):
        store.delete_file(oid)


def test_get_from_offset_sends_range(s3) -> None:
    store, stubber = s3
    data = b"hello world"
    meta = _meta(data)
    tail = data[6:]

    stubber.add_response(
        "get_object",
        {"Body": StreamingBody(io.BytesIO(tail), len(tail)), "ContentLength": len(tail)},
        {"Bucket": BUCKET, "Key": object_key_for_oid(meta.oid), "Range": "bytes=6-"},
    )

    body = store.get(meta, 6)
    assert body.read() == b"world"


def test_get_from_start_sends_no_range(s3) -> None:
    store, stubber = s3
    data = b"hello world"
    meta = _meta(data)

    stubber.add_response(
        "get_object",
        {"Body": StreamingBody(io.BytesIO(data), len(data)), "ContentLength": len(data)},
        {"Bucket": BUCKET, "Key": object_key_for_oid(meta.oid)},
    )

    assert store.get(meta).read() == data


def test_get_missing_is_content_store_error(s3) -> None:
    store, stubber = s3
    meta = _meta(b"gone")
    stubber.add_client_error("get_object", service_error_code="NoSuchKey", http_status_code=404)

    with pytest.raises(ContentStoreError, match="content not found"):
        store.get(meta)


def test_put_error_is_content_store_error(s3) -> None:
    store, stubber = s3
    oid = sha256_hex(b"payload")
    stubber.add_client_error("head_bucket", service_error_code="403", http_status_code=403)
    stubber.add_client_error(
        "create_bucket", service_error_code="AccessDenied", http_status_code=403
    )

    with pytest.raises(ContentStoreError, match="failed to store"):
        store.put(oid, io.BytesIO(b"payload"))


@pytest.mark.parametrize("code", ["404", "NoSuchKey", "NotFound"])
def test_exists_false_when_missing(s3, code: str) -> None:
    store, stubber = s3
    oid = sha256_hex(b"payload")
    stubber.add_client_error(
        "head_object",
        service_error_code=code,
        http_status_code=404,
        expected_params={"Bucket": BUCKET, "Key": object_key_for_oid(oid)},
    )

    assert store.exists(oid) is False


def test_exists_true_and_other_errors_raise(s3) -> None:
    store, stubber = s3
    oid = sha256_hex(b"payload")
    stubber.add_response("head_object", {"ContentLength": 7})
    stubber.add_client_error("head_object", service_error_code="AccessDenied", http_status_code=403)

    assert store.exists(oid) is True
    with pytest.raises(ContentStoreError):
        store.exists(oid)
