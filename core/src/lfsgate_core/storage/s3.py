from __future__ import annotations

from typing import BinaryIO

from botocore.exceptions import BotoCoreError, ClientError

from lfsgate_core.db.objects import ObjectRow
from lfsgate_core.storage.base import ContentStoreError, object_key_for_oid


class S3ContentStore:
    """S3-compatible object payload storage."""

    provider_name = "s3"

    def __init__(
        self,
        *,
        endpoint_url: str | None,
        access_key: str | None,
        secret_key: str | None,
        region: str,
        use_ssl: bool,
        bucket: str,
    ) -> None:
        self._endpoint_url = endpoint_url
        self._access_key = access_key
        self._secret_key = secret_key
        self._region = region
        self._use_ssl = use_ssl
        self._bucket = bucket
        self._client = None

    @property
    def bucket(self) -> str:
        return self._bucket

    def _get_client(self):
        if self._client is not None:
            return self._client

        import boto3
        from botocore.client import Config

        self._client = boto3.client(
            "s3",
            endpoint_url=self._endpoint_url,
            aws_access_key_id=self._access_key,
            aws_secret_access_key=self._secret_key,
            region_name=self._region,
            use_ssl=self._use_ssl,
            config=Config(s3={"addressing_style": "path"}),
        )
        return self._client

    def ensure_bucket(self) -> None:
        client = self._get_client()
        try:
            client.head_bucket(Bucket=self._bucket)
            return
        except ClientError:
            # Best-effort create.
            client.create_bucket(Bucket=self._bucket)

    def exists(self, oid: str) -> bool:
        client = self._get_client()
        try:
            client.head_object(Bucket=self._bucket, Key=object_key_for_oid(oid))
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in {"404", "NoSuchKey", "NotFound"}:
                return False
            raise ContentStoreError(str(e)) from e
        except BotoCoreError as e:
            raise ContentStoreError(str(e)) from e
        return True

    def get(self, meta: ObjectRow, offset: int = 0) -> BinaryIO:
        client = self._get_client()
        kwargs = {"Bucket": self._bucket, "Key": object_key_for_oid(meta.oid)}
        if offset:
            kwargs["Range"] = f"bytes={offset}-"
        try:
            r = client.get_object(**kwargs)
        except (BotoCoreError, ClientError) as e:
            raise ContentStoreError(f"content not found: {meta.oid}") from e
        return r["Body"]

    def put(self, oid: str, stream: BinaryIO) -> int:
        client = self._get_client()
        key = object_key_for_oid(oid)
        try:
            self.ensure_bucket()
            client.upload_fileobj(stream, self._bucket, key)
            r = client.head_object(Bucket=self._bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise ContentStoreError(f"failed to store {oid}: {e}") from e
        return int(r.get("ContentLength") or 0)

    def delete_file(self, oid: str) -> None:
        # S3 DeleteObject succeeds for keys that do not exist.
        client = self._get_client()
        try:
            client.delete_object(Bucket=self._bucket, Key=object_key_for_oid(oid))
        except (BotoCoreError, ClientError) as e:
            raise ContentStoreError(f"failed to delete {oid}: {e}") from e
