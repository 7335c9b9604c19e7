class KeyValueError(Exception):
    """Base exception for key-value store operations."""

    def __init__(self, message: str = "Key-value operation failed") -> None:
        super().__init__(message)
        self.message = message


class KeyValueConnectionError(KeyValueError):
    """Raised when the backing store cannot be reached."""

    def __init__(self, message: str = "Failed to connect to key-value store") -> None:
        super().__init__(message)


class KeyValueKeyError(KeyValueError):
    """Raised when a key is empty or too long."""

    def __init__(self, message: str = "Invalid key") -> None:
        super().__init__(message)


class KeyValueConfigurationError(KeyValueError):
    """Raised when the store or channel configuration is invalid."""

    def __init__(self, message: str = "Invalid key-value store configuration") -> None:
        super().__init__(message)
