from __future__ import annotations
import typing as t

from autoinject import injector

from .aws_s3 import AwsS3FileHandle, AwsS3DirectoryHandle
from .azure_blob import AzureBlobFileHandle, AzureBlobDirectoryHandle
from .azure_files import AzureShareFileHandle, AzureShareDirectoryHandle
from .base import BaseFileHandle, BaseDirectoryHandle, LogCallback
from .clients import Clients
from .exc import UnknownUrlType
from .local import LocalFileHandle, LocalDirectoryHandle, NetworkFileHandle, NetworkDirectoryHandle
from .urls import Backend, parse_url, is_directory


@injector.injectable_global
class StorageController:
    """Controller class that identifies the correct handler for a given string.

        s3://BUCKET/KEY -> AwsS3FileHandle / AwsS3DirectoryHandle
        https://ACCOUNT.blob.core.windows.net/CONTAINER/KEY -> AzureBlobFileHandle / AzureBlobDirectoryHandle
        https://ACCOUNT.file.core.windows.net/SHARE/PATH -> AzureShareFileHandle / AzureShareDirectoryHandle
        \\\\SERVER\\SHARE\\PATH -> NetworkFileHandle / NetworkDirectoryHandle
        (default or path-like) -> LocalFileHandle / LocalDirectoryHandle
    """

    def __init__(self):
        self.handle_classes: dict[Backend, tuple[type[BaseFileHandle], type[BaseDirectoryHandle]]] = {
            Backend.LOCAL: (LocalFileHandle, LocalDirectoryHandle),
            Backend.NETWORK: (NetworkFileHandle, NetworkDirectoryHandle),
            Backend.AWS_S3: (AwsS3FileHandle, AwsS3DirectoryHandle),
            Backend.AZURE_BLOB: (AzureBlobFileHandle, AzureBlobDirectoryHandle),
            Backend.AZURE_SHARE: (AzureShareFileHandle, AzureShareDirectoryHandle),
        }

    @staticmethod
    def _client_for(backend: Backend, clients: t.Optional[Clients]):
        if clients is None:
            return None
        if backend == Backend.AWS_S3:
            return clients.aws
        if backend in (Backend.AZURE_BLOB, Backend.AZURE_SHARE):
            return clients.azure
        return None

    def get_file(self, url: str, clients: t.Optional[Clients] = None) -> BaseFileHandle:
        """Build a file handle for the given URL."""
        parsed = parse_url(url)
        if parsed.backend not in self.handle_classes or parsed.is_directory():
            raise UnknownUrlType(url, "file")
        return self.handle_classes[parsed.backend][0](url, self._client_for(parsed.backend, clients))

    def get_directory(self, url: str, clients: t.Optional[Clients] = None) -> BaseDirectoryHandle:
        """Build a directory handle for the given URL."""
        parsed = parse_url(url)
        if parsed.backend not in self.handle_classes or not parsed.is_directory():
            raise UnknownUrlType(url, "directory")
        return self.handle_classes[parsed.backend][1](url, self._client_for(parsed.backend, clients))

    def create_file(self,
                    url: str,
                    clients: t.Optional[Clients] = None,
                    overwrite: bool = True,
                    verbose: bool = True,
                    callback_label: t.Optional[str] = None,
                    callback: t.Optional[LogCallback] = None) -> BaseFileHandle:
        return self.get_file(url, clients).create(overwrite, verbose, callback_label, callback)

    def create_directory(self,
                         url: str,
                         clients: t.Optional[Clients] = None,
                         fail_if_exists: bool = False,
                         verbose: bool = True,
                         callback_label: t.Optional[str] = None,
                         callback: t.Optional[LogCallback] = None) -> BaseDirectoryHandle:
        return self.get_directory(url, clients).create(fail_if_exists, verbose, callback_label, callback)

    def delete(self,
               url: str,
               clients: t.Optional[Clients] = None,
               recurse: bool = True,
               stop_on_error: bool = True,
               verbose: bool = True,
               callback_label: t.Optional[str] = None,
               callback: t.Optional[LogCallback] = None) -> bool:
        """Delete a file or a directory, depending on the trailing separator."""
        if is_directory(url):
            return self.get_directory(url, clients).delete(recurse, stop_on_error, verbose, callback_label, callback)
        return self.get_file(url, clients).delete(stop_on_error, verbose, callback_label, callback)

    def exists(self, url: str, clients: t.Optional[Clients] = None) -> bool:
        if is_directory(url):
            return self.get_directory(url, clients).exists()
        return self.get_file(url, clients).exists()

    def path_combine(self, *paths: str) -> str:
        """Join paths using the rules of the backend of the first path."""
        if not paths:
            raise UnknownUrlType(None)
        backend = parse_url(paths[0]).backend
        if backend not in self.handle_classes:
            raise UnknownUrlType(paths[0])
        return self.handle_classes[backend][1].combine_paths(*paths)


@injector.inject
def _controller(controller: StorageController = None) -> StorageController:
    return controller


def get_file(url: str, clients: t.Optional[Clients] = None) -> BaseFileHandle:
    return _controller().get_file(url, clients)


def get_directory(url: str, clients: t.Optional[Clients] = None) -> BaseDirectoryHandle:
    return _controller().get_directory(url, clients)


def create_file(url: str, clients: t.Optional[Clients] = None, *args, **kwargs) -> BaseFileHandle:
    return _controller().create_file(url, clients, *args, **kwargs)


def create_directory(url: str, clients: t.Optional[Clients] = None, *args, **kwargs) -> BaseDirectoryHandle:
    return _controller().create_directory(url, clients, *args, **kwargs)


def delete(url: str, clients: t.Optional[Clients] = None, *args, **kwargs) -> bool:
    return _controller().delete(url, clients, *args, **kwargs)


def exists(url: str, clients: t.Optional[Clients] = None) -> bool:
    return _controller().exists(url, clients)


def path_combine(*paths: str) -> str:
    return _controller().path_combine(*paths)
