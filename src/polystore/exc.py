import typing as t


class PolystoreError(Exception):
    """Super-type of all errors raised by polystore"""

    def __init__(self, msg: str, code_space: str = "GEN", code_number: int = None, is_recoverable: bool = False):
        self.internal_code = "" if code_number is None else f"{code_space}-{code_number}"
        super().__init__(f"{msg} [{self.internal_code}]" if self.internal_code else msg)
        self.is_recoverable = is_recoverable


class ClientNotConfigured(PolystoreError):
    """Raised when a backend operation needs a client that was never supplied."""

    def __init__(self, client_name: str, url: t.Optional[str] = None):
        super().__init__(f"{client_name} not set for [{url}]", "CLIENT", 1000)


class UnknownUrlType(PolystoreError):
    """Raised when a URL cannot be turned into a handle."""

    def __init__(self, url: t.Optional[str], expected: str = "file or directory"):
        super().__init__(f"Url [{url}] is not a known {expected} type", "URL", 1000)


class AlreadyExists(PolystoreError):

    def __init__(self, url: str, what: str = "File"):
        super().__init__(f"{what} [{url}] already exists", "STORAGE", 1001, is_recoverable=True)


class NotEmpty(PolystoreError):

    def __init__(self, url: str):
        super().__init__(f"Directory [{url}] is not empty", "STORAGE", 1006)


class BackendIoFailure(PolystoreError):
    """Wraps errors raised by the underlying storage SDK or the operating system."""

    def __init__(self, msg, code, is_recoverable: bool = False):
        super().__init__(msg, "STORAGE", code, is_recoverable=is_recoverable)
