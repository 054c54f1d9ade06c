"""Launcher error types."""


class LauncherError(Exception):
    """Base class for every error the launcher raises on purpose."""


class NetworkError(LauncherError):
    """A request failed in a way that may succeed later."""


class RetryExhaustedError(NetworkError):
    def __init__(self, url: str, attempts: int, last_error: object = None):
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"GET {url} failed after {attempts} attempts: {last_error}")


class IntegrityError(LauncherError):
    def __init__(self, target: object, expected: str, actual: str):
        self.target = target
        self.expected = expected
        self.actual = actual
        super().__init__(f"SHA1 mismatch for {target}: expected {expected}, got {actual}")


class FilesystemError(LauncherError):
    """Reading or writing local data failed."""


class MalformedManifest(LauncherError):
    """A manifest document could not be parsed into the expected shape."""


class UnresolvedVersion(LauncherError):
    """No local or remote copy of a version could be found."""


class AuthenticationError(LauncherError):
    """The player profile could not be created."""
