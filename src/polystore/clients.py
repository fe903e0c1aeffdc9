"""Backend clients and the registry that carries them.

    A Clients instance is built once by the caller (or from configuration)
    and passed by reference to every handle that needs to talk to a cloud
    backend. Handles never modify it.
"""
from __future__ import annotations
import typing as t

import boto3
import zirconium as zr
import zrlog
from autoinject import injector
from azure.identity import DefaultAzureCredential
from azure.storage.blob import ContainerClient
from azure.storage.fileshare import ShareFileClient, ShareDirectoryClient


class AwsClient:
    """Wrapper around a boto3 S3 client."""

    def __init__(self, s3_client):
        self.s3 = s3_client


class AzureClient:
    """Builds Azure SDK clients from a connection string or a token credential."""

    def __init__(self, connection_string: t.Optional[str] = None, credential=None):
        self.connection_string = connection_string
        self._credential = credential

    def credential(self):
        if self._credential is None:
            self._credential = DefaultAzureCredential()
        return self._credential

    def container_client(self, account: str, container_name: str) -> ContainerClient:
        if self.connection_string:
            return ContainerClient.from_connection_string(
                conn_str=self.connection_string,
                container_name=container_name
            )
        return ContainerClient(
            account_url=f"https://{account}.blob.core.windows.net",
            container_name=container_name,
            credential=self.credential()
        )

    def share_file_client(self, account: str, share_name: str, file_path: str) -> ShareFileClient:
        if self.connection_string:
            return ShareFileClient.from_connection_string(
                conn_str=self.connection_string,
                share_name=share_name,
                file_path=file_path
            )
        return ShareFileClient(
            account_url=f"https://{account}.file.core.windows.net",
            share_name=share_name,
            file_path=file_path,
            credential=self.credential(),
            token_intent="backup"
        )

    def share_directory_client(self, account: str, share_name: str, directory_path: str) -> ShareDirectoryClient:
        if self.connection_string:
            return ShareDirectoryClient.from_connection_string(
                conn_str=self.connection_string,
                share_name=share_name,
                directory_path=directory_path
            )
        return ShareDirectoryClient(
            account_url=f"https://{account}.file.core.windows.net",
            share_name=share_name,
            directory_path=directory_path,
            credential=self.credential(),
            token_intent="backup"
        )


def init_aws_client(region: t.Optional[str] = None,
                    access_key: t.Optional[str] = None,
                    secret_key: t.Optional[str] = None,
                    endpoint_url: t.Optional[str] = None) -> AwsClient:
    """Build an AWS client.

        The access key pair is only used when both halves are given; otherwise
        boto3 falls back to its usual environment variables and credential files.
    """
    kwargs = {}
    if access_key and access_key.strip() and secret_key and secret_key.strip():
        kwargs["aws_access_key_id"] = access_key
        kwargs["aws_secret_access_key"] = secret_key
    if region:
        kwargs["region_name"] = region
    if endpoint_url:
        kwargs["endpoint_url"] = endpoint_url
    return AwsClient(boto3.client("s3", **kwargs))


def init_azure_client(connection_string: t.Optional[str] = None, credential=None) -> AzureClient:
    """Build an Azure client from a connection string, or from a credential (DefaultAzureCredential if None)."""
    return AzureClient(connection_string, credential)


class Clients:
    """Registry of at most one client per cloud provider."""

    def __init__(self, aws: t.Optional[AwsClient] = None, azure: t.Optional[AzureClient] = None):
        self.aws = aws
        self.azure = azure

    @classmethod
    @injector.inject
    def from_config(cls, config: zr.ApplicationConfig = None) -> Clients:
        log = zrlog.get_logger("polystore.clients")
        aws = None
        if config.as_bool(("polystore", "aws", "enabled"), default=True):
            aws = init_aws_client(
                region=config.as_str(("polystore", "aws", "region"), default=None),
                access_key=config.as_str(("polystore", "aws", "access_key"), default=None),
                secret_key=config.as_str(("polystore", "aws", "secret_key"), default=None),
                endpoint_url=config.as_str(("polystore", "aws", "endpoint_url"), default=None),
            )
            log.debug("AWS client initialized")
        azure = None
        connection_string = config.as_str(("polystore", "azure", "connection_string"), default=None)
        if connection_string:
            azure = init_azure_client(connection_string)
            log.debug("Azure client initialized from connection string")
        elif config.as_bool(("polystore", "azure", "use_default_credential"), default=False):
            azure = init_azure_client()
            log.debug("Azure client initialized with default credentials")
        return cls(aws, azure)
