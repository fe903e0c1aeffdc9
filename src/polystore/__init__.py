"""
    Provides a single file and directory abstraction over local disks, network
    shares, AWS S3, Azure Blob containers and Azure File Shares.

    In general, one should use the StorageController (or the module-level
    helpers below) to get a handle to a file or directory. The handle knows how
    to perform the operations on the object regardless of where it is stored.

    One key note: for URL-based storage there is an ambiguity between a
    directory name and a file name - for example, is

    s3://bucket/hello-world

    a directory or a file? Without a server call it cannot be determined, and in
    blob storage the distinction does not really exist. This package therefore
    adopts a strict convention that directories end with a trailing separator
    (e.g. s3://bucket/directory/ or C:\\directory\\) and files do not. The
    convention applies to local paths as well; no system call is made to
    decide.

    Cloud handles need a client. Build a Clients registry once (explicitly, or
    from configuration with Clients.from_config()) and pass it along.
"""
from .exc import PolystoreError, ClientNotConfigured, UnknownUrlType, AlreadyExists, NotEmpty, BackendIoFailure
from .urls import Backend, Kind, ParsedUrl, parse_url, classify_url, is_directory, is_file
from .clients import Clients, AwsClient, AzureClient, init_aws_client, init_azure_client
from .base import AccessType, BaseStorageHandle, BaseFileHandle, BaseDirectoryHandle
from .core import (
    StorageController,
    get_file,
    get_directory,
    create_file,
    create_directory,
    delete,
    exists,
    path_combine,
)

__VERSION__ = "0.1.0"
