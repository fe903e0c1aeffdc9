"""AWS S3 handles.

    S3 has no directories, so directories follow the same placeholder and
    prefix convention as Azure blob containers.
"""
from __future__ import annotations
import functools
import io
import typing as t

from botocore.exceptions import BotoCoreError, ClientError

from .base import BaseFileHandle, PrefixDirectoryHandle
from .exc import PolystoreError, BackendIoFailure
from .urls import Backend


NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound")


def wrap_aws_errors(cb):

    @functools.wraps(cb)
    def _inner(*args, **kwargs):
        try:
            return cb(*args, **kwargs)
        except PolystoreError:
            raise
        except ClientError as ex:
            code = ex.response.get("Error", {}).get("Code", "")
            status = ex.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0) or 0
            if code in NOT_FOUND_CODES:
                raise BackendIoFailure(f"AWS: Resource not found error: {code}: {str(ex)}", 3004) from ex
            elif code in ("AccessDenied", "InvalidAccessKeyId", "SignatureDoesNotMatch"):
                raise BackendIoFailure(f"AWS: Client authentication error: {code}: {str(ex)}", 3003, True) from ex
            raise BackendIoFailure(f"AWS: {code}: {str(ex)}", 3001, status == 429 or status >= 500) from ex
        except BotoCoreError as ex:
            raise BackendIoFailure(f"AWS: {ex.__class__.__name__}: {str(ex)}", 3000, True) from ex

    return _inner


class _AwsS3Mixin:

    backends = (Backend.AWS_S3,)
    client_name = "AwsClient"

    def _s3(self):
        return self._client.s3

    @property
    def bucket(self) -> t.Optional[str]:
        return self._url_info.storage_name


class AwsS3FileHandle(_AwsS3Mixin, BaseFileHandle):

    @wrap_aws_errors
    def _exists(self) -> bool:
        try:
            self._s3().head_object(Bucket=self.bucket, Key=self._url_info.key)
            return True
        except ClientError as ex:
            if ex.response.get("Error", {}).get("Code") in NOT_FOUND_CODES:
                return False
            raise

    @wrap_aws_errors
    def _download(self, buffer: io.BytesIO):
        if self._exists():
            response = self._s3().get_object(Bucket=self.bucket, Key=self._url_info.key)
            buffer.write(response["Body"].read())

    @wrap_aws_errors
    def _upload(self, data: bytes):
        self._s3().put_object(Bucket=self.bucket, Key=self._url_info.key, Body=data)

    @wrap_aws_errors
    def _remove(self):
        self._s3().delete_object(Bucket=self.bucket, Key=self._url_info.key)


class AwsS3DirectoryHandle(_AwsS3Mixin, PrefixDirectoryHandle):

    @wrap_aws_errors
    def _exists(self) -> bool:
        response = self._s3().list_objects_v2(Bucket=self.bucket, Prefix=self.prefix, MaxKeys=1)
        return response.get("KeyCount", 0) > 0

    @wrap_aws_errors
    def _list_keys(self) -> list[str]:
        keys = []
        paginator = self._s3().get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket, Prefix=self.prefix):
            for obj in page.get("Contents", []):
                keys.append(obj["Key"])
        return keys

    @wrap_aws_errors
    def _put_object(self, key: str, data: bytes):
        self._s3().put_object(Bucket=self.bucket, Key=key, Body=data)

    @wrap_aws_errors
    def _delete_key(self, key: str):
        self._s3().delete_object(Bucket=self.bucket, Key=key)

    def _make_file_handle(self, url: str) -> AwsS3FileHandle:
        return AwsS3FileHandle(url, self._client)

    def _make_directory_handle(self, url: str) -> AwsS3DirectoryHandle:
        return AwsS3DirectoryHandle(url, self._client)
