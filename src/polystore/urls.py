"""URL classification.

    Every handle in polystore is built from a single string. The backend is
    decided by the shape of that string and the kind (file or directory) is
    decided by the trailing separator alone:

        s3://BUCKET/KEY                                     -> AWS S3
        https://ACCOUNT.blob.core.windows.net/CONTAINER/KEY -> Azure Blob
        https://ACCOUNT.file.core.windows.net/SHARE/PATH    -> Azure File Share
        \\\\SERVER\\SHARE\\PATH                               -> Network (UNC)
        file://PATH or any other path                       -> Local

    No backend is ever queried to decide if something is a directory. A local
    path without a trailing separator is a file, even if a directory of that
    name exists on disk.
"""
from __future__ import annotations
import enum
import re
import typing as t


S3_PATTERN = re.compile(r"^(s3://([^/]*)/?)(.*)$", re.IGNORECASE)
AZURE_PATTERN = re.compile(r"^(https://(.*?)\.(file|blob)\.core\.windows\.net/(.*?)/)(.*)$", re.IGNORECASE)


class Backend(enum.Enum):

    LOCAL = "local"
    NETWORK = "network"
    AWS_S3 = "aws_s3"
    AZURE_BLOB = "azure_blob"
    AZURE_SHARE = "azure_share"
    UNKNOWN = "unknown"


class Kind(enum.Enum):

    FILE = "file"
    DIRECTORY = "directory"


def is_directory(url: t.Optional[str]) -> bool:
    """Check if the url follows the directory convention (trailing / or \\)."""
    if url is None:
        return False
    return url.endswith("/") or url.endswith("\\")


def is_file(url: t.Optional[str]) -> bool:
    if url is None:
        return False
    return not is_directory(url)


class ParsedUrl:
    """The parts of a URL, as far as they could be determined.

        Fields that could not be derived are left as None; it is up to the
        caller to check `backend` before relying on them.
    """

    def __init__(self,
                 url: t.Optional[str],
                 backend: Backend = Backend.UNKNOWN,
                 root: t.Optional[str] = None,
                 account: t.Optional[str] = None,
                 storage_name: t.Optional[str] = None,
                 key: t.Optional[str] = None):
        self.url = url
        self.backend = backend
        self.kind = Kind.DIRECTORY if is_directory(url) else Kind.FILE
        self.root = root
        self.account = account
        self.storage_name = storage_name
        self.key = key

    def is_directory(self) -> bool:
        return self.kind == Kind.DIRECTORY

    def is_known(self) -> bool:
        return self.backend != Backend.UNKNOWN

    def __repr__(self):
        return f"ParsedUrl({self.url!r}, {self.backend.name}, {self.kind.name})"


def parse_url(url: t.Optional[str]) -> ParsedUrl:
    """Decompose a URL into its parts. Never raises."""
    if not url:
        return ParsedUrl(url)
    match = S3_PATTERN.match(url)
    if match:
        return ParsedUrl(
            url,
            Backend.AWS_S3,
            root=match.group(1) if match.group(1).endswith("/") else f"{match.group(1)}/",
            storage_name=match.group(2),
            key=match.group(3)
        )
    match = AZURE_PATTERN.match(url)
    if match:
        return ParsedUrl(
            url,
            Backend.AZURE_BLOB if match.group(3).lower() == "blob" else Backend.AZURE_SHARE,
            root=match.group(1),
            account=match.group(2),
            storage_name=match.group(4),
            key=match.group(5)
        )
    if url.startswith("\\\\"):
        return ParsedUrl(url, Backend.NETWORK, key=url)
    if url.lower().startswith("file://"):
        return ParsedUrl(url, Backend.LOCAL, key=url[7:])
    return ParsedUrl(url, Backend.LOCAL, key=url)


def classify_url(url: t.Optional[str]) -> tuple[Backend, Kind]:
    """Determine the backend and kind of the given URL."""
    parsed = parse_url(url)
    return parsed.backend, parsed.kind


def url_path_combine(*paths: t.Optional[str]) -> str:
    """Join URL segments with forward slashes.

        Every segment but the last gets a trailing slash if it does not have
        one already; leading slashes on later segments are dropped so the
        separator is never doubled.
    """
    result = ""
    last_idx = len(paths) - 1
    for idx, path in enumerate(paths):
        if path is None:
            continue
        path = path.strip()
        if result and result.endswith("/"):
            path = path.lstrip("/")
            if not path:
                continue
        if path.endswith("/") or idx == last_idx:
            result += path
        else:
            result += f"{path}/"
    return result
