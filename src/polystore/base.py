from __future__ import annotations
import enum
import functools
import io
import logging
import typing as t

import zrlog

from .exc import PolystoreError, BackendIoFailure, ClientNotConfigured, UnknownUrlType, AlreadyExists, NotEmpty
from .urls import Backend, ParsedUrl, parse_url, url_path_combine


# Zero-length object that marks a directory on backends without native directories
PLACEHOLDER_SUFFIX = "_"

LogCallback = t.Callable[[str, t.Optional[str]], None]


class AccessType(enum.Enum):

    READ = "read"
    WRITE = "write"
    APPEND = "append"


def local_file_error_wrap(cb):
    """Converts typical local file-system errors into BackendIoFailures with recoverable set properly."""

    @functools.wraps(cb)
    def _inner(*args, **kwargs):
        try:
            return cb(*args, **kwargs)
        except PolystoreError:
            raise
        except FileNotFoundError as ex:
            raise BackendIoFailure(f"Local file not found", 1002) from ex
        except PermissionError as ex:
            raise BackendIoFailure(f"Access to local file denied", 1003, True) from ex
        except IsADirectoryError as ex:
            raise BackendIoFailure(f"Local file is a directory", 1004) from ex
        except NotADirectoryError as ex:
            raise BackendIoFailure(f"Local directory is not a directory", 1005) from ex
        except OSError as ex:
            raise BackendIoFailure(f"Exception processing local file: {ex.__class__.__name__}: {str(ex)}", 1000) from ex

    return _inner


class BaseStorageHandle:
    """Common behaviour of file and directory handles.

        The identity accessors (full_name, name, parent, root) implement the
        URL-style rules shared by the cloud backends; local handles override them.
    """

    backends: tuple[Backend, ...] = ()
    client_name: t.Optional[str] = None

    def __init__(self, url: t.Optional[str], client=None):
        self._url_info = parse_url(url)
        self._client = client
        self._log = zrlog.get_logger(f"polystore.{self.__class__.__name__}")

    def __str__(self):
        return str(self.full_name)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.full_name!r})"

    @property
    def url_info(self) -> ParsedUrl:
        return self._url_info

    @property
    def client(self):
        return self._client

    @property
    def separator(self) -> str:
        return "/"

    @property
    def full_name(self) -> t.Optional[str]:
        return self._url_info.url

    def _key_parts(self) -> list[str]:
        if self._url_info.key is None:
            return []
        return [x for x in self._url_info.key.split("/") if x]

    @property
    def name(self) -> t.Optional[str]:
        parts = self._key_parts()
        return parts[-1] if parts else None

    @property
    def parent(self) -> t.Optional[str]:
        parts = self._key_parts()
        if not parts:
            return None
        if len(parts) == 1:
            return self._url_info.root
        return f"{self._url_info.root}{'/'.join(parts[:-1])}/"

    @property
    def root(self) -> t.Optional[str]:
        return self._url_info.root

    def _require_known(self):
        if self._url_info.backend not in self.backends:
            raise UnknownUrlType(self._url_info.url, self.__class__.__name__)

    def _require_client(self):
        if self.client_name is not None and self._client is None:
            raise ClientNotConfigured(self.client_name, self._url_info.url)

    def _require_ready(self):
        self._require_known()
        self._require_client()

    def _notify(self, message: str, callback_label: t.Optional[str] = None, callback: t.Optional[LogCallback] = None, level: int = logging.INFO):
        """Send a message to the log and to the caller's callback, if any."""
        self._log.log(level, message if callback_label is None else f"{callback_label}: {message}")
        if callback is not None:
            callback(message, callback_label)

    def exists(self) -> bool:
        """Check if the object exists on the backend."""
        self._require_ready()
        return self._exists()

    def _exists(self) -> bool:
        raise NotImplementedError

    @classmethod
    def combine_paths(cls, *paths: t.Optional[str]) -> str:
        """Join path segments using the rules of this backend."""
        return url_path_combine(*paths)

    def path_combine(self, *paths: t.Optional[str]) -> str:
        return self.combine_paths(*paths)


class BaseFileHandle(BaseStorageHandle):
    """A single file, buffered in memory while open."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._buffer: t.Optional[io.BytesIO] = None

    def is_open(self) -> bool:
        return self._buffer is not None

    @property
    def buffer(self) -> t.Optional[io.BytesIO]:
        return self._buffer

    def create(self, overwrite: bool = True, verbose: bool = True, callback_label: t.Optional[str] = None, callback: t.Optional[LogCallback] = None) -> BaseFileHandle:
        """Create an empty file, replacing the existing one unless overwrite is False."""
        try:
            self._require_ready()
            if (not overwrite) and self._exists():
                raise AlreadyExists(self.full_name)
            self._buffer = io.BytesIO()
            self.flush(verbose=False)
            if verbose:
                self._notify(f"File [{self.full_name}] was created.", callback_label, callback)
            return self
        except Exception as ex:
            self._notify(f"ERROR - {str(ex)}", callback_label, callback, logging.ERROR)
            raise

    def open(self, access: AccessType = AccessType.READ, verbose: bool = True, callback_label: t.Optional[str] = None, callback: t.Optional[LogCallback] = None) -> io.BytesIO:
        """Load the file into an in-memory buffer and return it.

            READ rewinds to the start, APPEND leaves the position at the end and
            WRITE starts with an empty buffer. A missing file gives an empty buffer.
        """
        try:
            self._require_ready()
            buffer = io.BytesIO()
            if access != AccessType.WRITE:
                self._download(buffer)
                if access == AccessType.READ:
                    buffer.seek(0)
            self._buffer = buffer
            if verbose:
                self._notify(f"File [{self.full_name}] was opened for {access.value}.", callback_label, callback, logging.DEBUG)
            return buffer
        except Exception as ex:
            self._notify(f"ERROR - {str(ex)}", callback_label, callback, logging.ERROR)
            raise

    def flush(self, verbose: bool = True, callback_label: t.Optional[str] = None, callback: t.Optional[LogCallback] = None):
        """Replace the remote content with the content of the buffer."""
        if self._buffer is None:
            if verbose:
                self._notify(f"File [{self.full_name}] is not open, nothing to flush.", callback_label, callback)
            return
        self._require_ready()
        self._upload(self._buffer.getvalue())
        if verbose:
            self._notify(f"File [{self.full_name}] was flushed.", callback_label, callback)

    def close(self, verbose: bool = True, callback_label: t.Optional[str] = None, callback: t.Optional[LogCallback] = None):
        """Flush the buffer and release it."""
        if self._buffer is not None:
            self.flush(verbose=False)
            self._buffer.close()
            self._buffer = None
            if verbose:
                self._notify(f"File [{self.full_name}] was closed.", callback_label, callback)
        elif verbose:
            self._notify(f"File [{self.full_name}] is already closed.", callback_label, callback)

    def delete(self, stop_on_error: bool = True, verbose: bool = True, callback_label: t.Optional[str] = None, callback: t.Optional[LogCallback] = None) -> bool:
        """Remove the file if it exists. Returns False on failure when stop_on_error is False."""
        try:
            self._require_ready()
            if self._exists():
                self._remove()
            if verbose:
                self._notify(f"File [{self.full_name}] was deleted.", callback_label, callback)
            return True
        except Exception as ex:
            self._notify(str(ex), callback_label, callback, logging.ERROR)
            if stop_on_error:
                raise
            return False

    def read_all_bytes(self) -> bytes:
        self._require_ready()
        buffer = io.BytesIO()
        self._download(buffer)
        return buffer.getvalue()

    def read_all_text(self, encoding: str = "utf-8") -> str:
        return self.read_all_bytes().decode(encoding)

    def write_all_bytes(self, data: bytes, verbose: bool = True, callback_label: t.Optional[str] = None, callback: t.Optional[LogCallback] = None):
        self._require_ready()
        self._upload(bytes(data))
        if verbose:
            self._notify(f"File [{self.full_name}] was written.", callback_label, callback)

    def write_all_text(self, text: str, encoding: str = "utf-8", verbose: bool = True, callback_label: t.Optional[str] = None, callback: t.Optional[LogCallback] = None):
        self.write_all_bytes(text.encode(encoding), verbose, callback_label, callback)

    def copy_to(self, target: BaseFileHandle, overwrite: bool = True, verbose: bool = True, callback_label: t.Optional[str] = None, callback: t.Optional[LogCallback] = None) -> BaseFileHandle:
        """Copy the content of this file to another file, possibly on another backend."""
        try:
            if (not overwrite) and target.exists():
                raise AlreadyExists(target.full_name)
            target.write_all_bytes(self.read_all_bytes(), verbose=False)
            if verbose:
                self._notify(f"File [{self.full_name}] was copied to [{target.full_name}].", callback_label, callback)
            return target
        except Exception as ex:
            self._notify(f"ERROR - {str(ex)}", callback_label, callback, logging.ERROR)
            raise

    def move_to(self, target: BaseFileHandle, overwrite: bool = True, verbose: bool = True, callback_label: t.Optional[str] = None, callback: t.Optional[LogCallback] = None) -> BaseFileHandle:
        self.copy_to(target, overwrite, False, callback_label, callback)
        self.delete(True, False, callback_label, callback)
        if verbose:
            self._notify(f"File [{self.full_name}] was moved to [{target.full_name}].", callback_label, callback)
        return target

    def _download(self, buffer: io.BytesIO):
        """Write the current content into the buffer, if the file exists."""
        raise NotImplementedError

    def _upload(self, data: bytes):
        """Replace the remote content with the given bytes."""
        raise NotImplementedError

    def _remove(self):
        raise NotImplementedError


class BaseDirectoryHandle(BaseStorageHandle):
    """A directory; listings are computed fresh on every call."""

    def create(self, fail_if_exists: bool = False, verbose: bool = True, callback_label: t.Optional[str] = None, callback: t.Optional[LogCallback] = None) -> BaseDirectoryHandle:
        try:
            self._require_ready()
            exists = self._exists()
            if exists and fail_if_exists:
                raise AlreadyExists(self.full_name, "Directory")
            if not exists:
                self._make()
            if verbose:
                self._notify(f"Directory [{self.full_name}] was created.", callback_label, callback)
            return self
        except Exception as ex:
            self._notify(f"ERROR - {str(ex)}", callback_label, callback, logging.ERROR)
            raise

    def delete(self, recurse: bool = True, stop_on_error: bool = True, verbose: bool = True, callback_label: t.Optional[str] = None, callback: t.Optional[LogCallback] = None) -> bool:
        """Remove the directory.

            Without recurse, the directory must be empty or NotEmpty is raised.
            Returns True only if everything was removed; failures are logged and
            re-raised when stop_on_error is True.
        """
        success = True
        try:
            self._require_ready()
            if self._exists():
                success = self._remove(recurse, stop_on_error, verbose, callback_label, callback)
            if verbose and success:
                self._notify(f"Directory [{self.full_name}] was deleted.", callback_label, callback)
        except Exception as ex:
            success = False
            self._notify(str(ex), callback_label, callback, logging.ERROR)
            if stop_on_error:
                raise
        return success

    def _delete_children(self, stop_on_error: bool, verbose: bool, callback_label: t.Optional[str], callback: t.Optional[LogCallback]) -> bool:
        """Depth-first removal of every child, sub-directories first."""
        success = True
        for sub_dir in self.get_directories():
            if not sub_dir.delete(True, stop_on_error, verbose, callback_label, callback):
                success = False
        for sub_file in self.get_files():
            if not sub_file.delete(stop_on_error, verbose, callback_label, callback):
                success = False
        return success

    def get_files(self) -> list[BaseFileHandle]:
        raise NotImplementedError

    def get_directories(self) -> list[BaseDirectoryHandle]:
        raise NotImplementedError

    def child(self, sub_path: str) -> BaseFileHandle:
        """Get a handle to a file in this directory (no I/O)."""
        return self._make_file_handle(self.path_combine(self.full_name, sub_path.strip("/\\")))

    def subdir(self, sub_path: str) -> BaseDirectoryHandle:
        """Get a handle to a sub-directory of this directory (no I/O)."""
        return self._make_directory_handle(self.path_combine(self.full_name, sub_path.strip("/\\")) + self.separator)

    def walk(self) -> t.Iterable[BaseFileHandle]:
        """Find all files below this directory, depth-first."""
        yield from self.get_files()
        for sub_dir in self.get_directories():
            yield from sub_dir.walk()

    def copy_to(self, target: BaseDirectoryHandle, overwrite: bool = True, verbose: bool = True, callback_label: t.Optional[str] = None, callback: t.Optional[LogCallback] = None) -> BaseDirectoryHandle:
        """Copy every file and sub-directory into the target directory."""
        target.create(False, verbose, callback_label, callback)
        for sub_file in self.get_files():
            sub_file.copy_to(target.child(sub_file.name), overwrite, verbose, callback_label, callback)
        for sub_dir in self.get_directories():
            sub_dir.copy_to(target.subdir(sub_dir.name), overwrite, verbose, callback_label, callback)
        return target

    def move_to(self, target: BaseDirectoryHandle, overwrite: bool = True, verbose: bool = True, callback_label: t.Optional[str] = None, callback: t.Optional[LogCallback] = None) -> BaseDirectoryHandle:
        self.copy_to(target, overwrite, verbose, callback_label, callback)
        self.delete(True, True, verbose, callback_label, callback)
        return target

    def _make(self):
        raise NotImplementedError

    def _remove(self, recurse: bool, stop_on_error: bool, verbose: bool, callback_label: t.Optional[str], callback: t.Optional[LogCallback]) -> bool:
        raise NotImplementedError

    def _make_file_handle(self, url: str) -> BaseFileHandle:
        raise NotImplementedError

    def _make_directory_handle(self, url: str) -> BaseDirectoryHandle:
        raise NotImplementedError


class PrefixDirectoryHandle(BaseDirectoryHandle):
    """Directory emulation for flat object stores.

        A directory is the placeholder object at KEY + "_" together with every
        object whose key starts with KEY. It exists if any such object exists.
    """

    @property
    def prefix(self) -> str:
        return self._url_info.key or ""

    @property
    def placeholder_key(self) -> str:
        return self.prefix + PLACEHOLDER_SUFFIX

    def _list_keys(self) -> list[str]:
        """List the keys of all live objects under the prefix."""
        raise NotImplementedError

    def _put_object(self, key: str, data: bytes):
        raise NotImplementedError

    def _delete_key(self, key: str):
        raise NotImplementedError

    def _make(self):
        self._put_object(self.placeholder_key, b"")

    def _remove(self, recurse: bool, stop_on_error: bool, verbose: bool, callback_label: t.Optional[str], callback: t.Optional[LogCallback]) -> bool:
        keys = self._list_keys()
        if not recurse:
            if len(keys) > 1 or (keys and keys[0] != self.placeholder_key):
                raise NotEmpty(self.full_name)
        # The placeholder goes last so a partial failure leaves the directory in place
        keys.sort(key=lambda x: x == self.placeholder_key)
        success = True
        for key in keys:
            try:
                self._delete_key(key)
                if verbose:
                    self._notify(f"Object [{self.root}{key}] was deleted.", callback_label, callback)
            except Exception as ex:
                success = False
                self._notify(str(ex), callback_label, callback, logging.ERROR)
                if stop_on_error:
                    raise
        return success

    def _child_names(self) -> tuple[list[str], list[str]]:
        prefix = self.prefix
        files = []
        directories = []
        for key in self._list_keys():
            item_name = key[len(prefix):]
            if "/" in item_name:
                dir_name = item_name[:item_name.index("/")]
                if dir_name and dir_name not in directories:
                    directories.append(dir_name)
            elif item_name and item_name != PLACEHOLDER_SUFFIX:
                files.append(item_name)
        return files, directories

    def get_files(self) -> list[BaseFileHandle]:
        self._require_ready()
        files, _ = self._child_names()
        return [self.child(x) for x in files]

    def get_directories(self) -> list[BaseDirectoryHandle]:
        self._require_ready()
        _, directories = self._child_names()
        return [self.subdir(x) for x in directories]
