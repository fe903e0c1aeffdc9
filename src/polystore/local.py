"""Local and network file handles.

    The underlying functionality is based on pathlib.Path. Network (UNC) paths
    use the same implementation with Windows path rules for naming.
"""
from __future__ import annotations
import io
import ntpath
import os
import pathlib
import shutil
import typing as t

from .base import BaseFileHandle, BaseDirectoryHandle, LogCallback, local_file_error_wrap
from .exc import NotEmpty
from .urls import Backend


def _with_separator(path: str, sep: str) -> str:
    if path.endswith("/") or path.endswith("\\"):
        return path
    return path + sep


class _LocalPathMixin:
    """Path handling shared by local files and directories."""

    path_class = pathlib.Path
    path_module = os.path

    def _build_path(self, raw: t.Optional[str]) -> t.Optional[pathlib.PurePath]:
        if raw is None:
            return None
        return self.path_class(raw).expanduser().absolute()

    def _io_path(self) -> pathlib.Path:
        return self._path

    @property
    def separator(self) -> str:
        return self.path_module.sep

    @property
    def name(self) -> t.Optional[str]:
        return self._path.name if self._path is not None else None

    @property
    def parent(self) -> t.Optional[str]:
        if self._path is None:
            return None
        return _with_separator(str(self._path.parent), self.separator)

    @property
    def root(self) -> t.Optional[str]:
        return self._path.anchor if self._path is not None else None

    @classmethod
    def combine_paths(cls, *paths: t.Optional[str]) -> str:
        fixed_paths = []
        for path in paths:
            if path is None:
                continue
            if path == "/" or path == "\\":
                # Empty directory names are not allowed, use an underscore instead
                fixed_paths.append(f"_{path}")
            else:
                fixed_paths.append(path)
        return cls.path_module.join(*fixed_paths)


class LocalFileHandle(_LocalPathMixin, BaseFileHandle):
    """Handle for a file on a local disk or an accessible network drive."""

    backends = (Backend.LOCAL, Backend.NETWORK)

    def __init__(self, url: t.Optional[str], client=None):
        super().__init__(url, client)
        self._path = self._build_path(self._url_info.key)

    @property
    def full_name(self) -> t.Optional[str]:
        return str(self._path) if self._path is not None else None

    @local_file_error_wrap
    def _exists(self) -> bool:
        return self._io_path().is_file()

    @local_file_error_wrap
    def _download(self, buffer: io.BytesIO):
        path = self._io_path()
        if path.is_file():
            with open(path, "rb") as src:
                shutil.copyfileobj(src, buffer)

    @local_file_error_wrap
    def _upload(self, data: bytes):
        with open(self._io_path(), "wb") as dest:
            dest.write(data)

    @local_file_error_wrap
    def _remove(self):
        self._io_path().unlink(True)


class LocalDirectoryHandle(_LocalPathMixin, BaseDirectoryHandle):
    """Handle for a directory on a local disk or an accessible network drive.

        The full name of a directory always ends with the path separator so
        that it can be passed back to the storage controller as-is.
    """

    backends = (Backend.LOCAL, Backend.NETWORK)

    def __init__(self, url: t.Optional[str], client=None):
        super().__init__(url, client)
        self._path = self._build_path(self._url_info.key)

    @property
    def full_name(self) -> t.Optional[str]:
        if self._path is None:
            return None
        return _with_separator(str(self._path), self.separator)

    @local_file_error_wrap
    def _exists(self) -> bool:
        return self._io_path().is_dir()

    @local_file_error_wrap
    def _make(self):
        self._io_path().mkdir(parents=True, exist_ok=True)

    @local_file_error_wrap
    def _remove(self, recurse: bool, stop_on_error: bool, verbose: bool, callback_label: t.Optional[str], callback: t.Optional[LogCallback]) -> bool:
        path = self._io_path()
        if recurse:
            shutil.rmtree(path)
        else:
            if any(path.iterdir()):
                raise NotEmpty(self.full_name)
            path.rmdir()
        return True

    @local_file_error_wrap
    def get_files(self) -> list[LocalFileHandle]:
        self._require_ready()
        return [
            self._make_file_handle(str(self._path / x.name))
            for x in sorted(self._io_path().iterdir())
            if x.is_file()
        ]

    @local_file_error_wrap
    def get_directories(self) -> list[LocalDirectoryHandle]:
        self._require_ready()
        return [
            self._make_directory_handle(_with_separator(str(self._path / x.name), self.separator))
            for x in sorted(self._io_path().iterdir())
            if x.is_dir()
        ]

    def _make_file_handle(self, url: str) -> LocalFileHandle:
        return LocalFileHandle(url)

    def _make_directory_handle(self, url: str) -> LocalDirectoryHandle:
        return LocalDirectoryHandle(url)


class _NetworkPathMixin:
    """UNC paths are named with Windows rules regardless of the host OS."""

    path_class = pathlib.PureWindowsPath
    path_module = ntpath

    def _build_path(self, raw: t.Optional[str]) -> t.Optional[pathlib.PurePath]:
        if raw is None:
            return None
        return self.path_class(raw)

    def _io_path(self) -> pathlib.Path:
        return pathlib.Path(str(self._path))


class NetworkFileHandle(_NetworkPathMixin, LocalFileHandle):
    pass


class NetworkDirectoryHandle(_NetworkPathMixin, LocalDirectoryHandle):

    def _make_file_handle(self, url: str) -> NetworkFileHandle:
        return NetworkFileHandle(url)

    def _make_directory_handle(self, url: str) -> NetworkDirectoryHandle:
        return NetworkDirectoryHandle(url)
