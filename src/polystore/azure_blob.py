"""Azure Blob Storage handles.

    Blob containers are flat, so a directory is a zero-length placeholder blob
    plus every blob sharing its prefix.
"""
from __future__ import annotations
import functools
import io

import azure.core.exceptions as ace
import requests
import urllib3.exceptions
from azure.storage.blob import ContainerClient

from .base import BaseFileHandle, PrefixDirectoryHandle
from .exc import PolystoreError, BackendIoFailure
from .urls import Backend


def wrap_azure_errors(cb):

    @functools.wraps(cb)
    def _inner(*args, **kwargs):
        try:
            return cb(*args, **kwargs)
        except PolystoreError:
            raise
        except ace.AzureError as ex:
            if isinstance(ex, ace.ClientAuthenticationError):
                raise BackendIoFailure(f"Azure: Client authentication error: {ex.__class__.__name__}: {str(ex)}", 2003, True) from ex
            elif isinstance(ex, ace.ResourceNotFoundError):
                raise BackendIoFailure(f"Azure: Resource not found error: {ex.__class__.__name__}: {str(ex)}", 2004) from ex
            elif isinstance(ex, ace.ResourceExistsError):
                raise BackendIoFailure(f"Azure: Resource already exists error: {ex.__class__.__name__}: {str(ex)}", 2005) from ex
            elif ex.inner_exception is not None:
                if isinstance(ex.inner_exception, urllib3.exceptions.ConnectTimeoutError):
                    raise BackendIoFailure(f"Azure: Connection timeout error: {ex.__class__.__name__}: {str(ex)}", 2001, True) from ex
                elif isinstance(ex.inner_exception, requests.ConnectionError):
                    raise BackendIoFailure(f"Azure: Connection error: {ex.__class__.__name__}: {str(ex)}", 2002, True) from ex
            raise BackendIoFailure(f"Azure: {ex.__class__.__name__}: {str(ex)}", 2000) from ex

    return _inner


class _AzureBlobMixin:

    backends = (Backend.AZURE_BLOB,)
    client_name = "AzureClient"

    def container_client(self) -> ContainerClient:
        return self._client.container_client(self._url_info.account, self._url_info.storage_name)


class AzureBlobFileHandle(_AzureBlobMixin, BaseFileHandle):

    @wrap_azure_errors
    def _exists(self) -> bool:
        return self.container_client().get_blob_client(self._url_info.key).exists()

    @wrap_azure_errors
    def _download(self, buffer: io.BytesIO):
        client = self.container_client().get_blob_client(self._url_info.key)
        if client.exists():
            client.download_blob().readinto(buffer)

    @wrap_azure_errors
    def _upload(self, data: bytes):
        container = self.container_client()
        self._delete_if_exists(container)
        container.upload_blob(name=self._url_info.key, data=data, overwrite=True)

    @wrap_azure_errors
    def _remove(self):
        self._delete_if_exists(self.container_client())

    def _delete_if_exists(self, container: ContainerClient):
        try:
            container.delete_blob(self._url_info.key)
        except ace.ResourceNotFoundError:
            pass


class AzureBlobDirectoryHandle(_AzureBlobMixin, PrefixDirectoryHandle):

    def _live_blobs(self, **kwargs):
        # Soft-deleted blobs are listed too but do not count
        blobs = self.container_client().list_blobs(name_starts_with=self.prefix or None, include=["deleted"], **kwargs)
        return (blob for blob in blobs if not blob.deleted)

    @wrap_azure_errors
    def _exists(self) -> bool:
        return next(self._live_blobs(results_per_page=1), None) is not None

    @wrap_azure_errors
    def _list_keys(self) -> list[str]:
        return [blob.name for blob in self._live_blobs()]

    @wrap_azure_errors
    def _put_object(self, key: str, data: bytes):
        self.container_client().upload_blob(name=key, data=data, overwrite=True)

    @wrap_azure_errors
    def _delete_key(self, key: str):
        self.container_client().delete_blob(key)

    def _make_file_handle(self, url: str) -> AzureBlobFileHandle:
        return AzureBlobFileHandle(url, self._client)

    def _make_directory_handle(self, url: str) -> AzureBlobDirectoryHandle:
        return AzureBlobDirectoryHandle(url, self._client)
