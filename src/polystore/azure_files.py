"""Azure File Share handles.

    Shares have native directories, but the service limits the size of a single
    write request, so uploads are sent as a series of ranged writes.
"""
from __future__ import annotations
import io
import typing as t

import azure.core.exceptions as ace
from azure.storage.fileshare import ShareFileClient, ShareDirectoryClient

from .azure_blob import wrap_azure_errors
from .base import BaseFileHandle, BaseDirectoryHandle, LogCallback
from .exc import NotEmpty
from .urls import Backend


UPLOAD_CHUNK_SIZE = 1024 * 1024


class _AzureShareMixin:

    backends = (Backend.AZURE_SHARE,)
    client_name = "AzureClient"

    def _path(self) -> str:
        return (self._url_info.key or "").strip("/")


class AzureShareFileHandle(_AzureShareMixin, BaseFileHandle):

    def file_client(self) -> ShareFileClient:
        return self._client.share_file_client(self._url_info.account, self._url_info.storage_name, self._path())

    @wrap_azure_errors
    def _exists(self) -> bool:
        try:
            self.file_client().get_file_properties()
            return True
        except ace.ResourceNotFoundError:
            return False

    @wrap_azure_errors
    def _download(self, buffer: io.BytesIO):
        client = self.file_client()
        try:
            properties = client.get_file_properties()
        except ace.ResourceNotFoundError:
            return
        if properties.size > 0:
            client.download_file().readinto(buffer)

    @wrap_azure_errors
    def _upload(self, data: bytes):
        client = self.file_client()
        self._delete_if_exists(client)
        client.create_file(size=len(data))
        offset = 0
        while offset < len(data):
            chunk = data[offset:offset + UPLOAD_CHUNK_SIZE]
            client.upload_range(chunk, offset=offset, length=len(chunk))
            offset += len(chunk)

    @wrap_azure_errors
    def _remove(self):
        self._delete_if_exists(self.file_client())

    @staticmethod
    def _delete_if_exists(client: ShareFileClient):
        try:
            client.delete_file()
        except ace.ResourceNotFoundError:
            pass


class AzureShareDirectoryHandle(_AzureShareMixin, BaseDirectoryHandle):

    def directory_client(self, path: t.Optional[str] = None) -> ShareDirectoryClient:
        return self._client.share_directory_client(
            self._url_info.account,
            self._url_info.storage_name,
            self._path() if path is None else path
        )

    @wrap_azure_errors
    def _exists(self) -> bool:
        return self.directory_client().exists()

    @wrap_azure_errors
    def _make(self):
        # Intermediate directories have to be created one at a time
        parts = [x for x in self._path().split("/") if x]
        for idx in range(1, len(parts) + 1):
            client = self.directory_client("/".join(parts[:idx]))
            if not client.exists():
                client.create_directory()

    @wrap_azure_errors
    def _list(self) -> list:
        return list(self.directory_client().list_directories_and_files())

    @wrap_azure_errors
    def _remove(self, recurse: bool, stop_on_error: bool, verbose: bool, callback_label: t.Optional[str], callback: t.Optional[LogCallback]) -> bool:
        success = True
        if recurse:
            success = self._delete_children(stop_on_error, verbose, callback_label, callback)
        elif self._list():
            raise NotEmpty(self.full_name)
        try:
            self.directory_client().delete_directory()
        except ace.HttpResponseError as ex:
            if getattr(ex, "error_code", None) == "DirectoryNotEmpty":
                raise NotEmpty(self.full_name) from ex
            raise
        return success

    def get_files(self) -> list[AzureShareFileHandle]:
        self._require_ready()
        return [self.child(x.name) for x in self._list() if not x.is_directory]

    def get_directories(self) -> list[AzureShareDirectoryHandle]:
        self._require_ready()
        return [self.subdir(x.name) for x in self._list() if x.is_directory]

    def _make_file_handle(self, url: str) -> AzureShareFileHandle:
        return AzureShareFileHandle(url, self._client)

    def _make_directory_handle(self, url: str) -> AzureShareDirectoryHandle:
        return AzureShareDirectoryHandle(url, self._client)
