"""
Configuration and signing exceptions for azblob.
"""


class AzBlobError(Exception):
    """Base exception for azblob errors."""

    def __init__(self, message: str, error_code: str = "AzBlobError"):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ConnectionStringError(AzBlobError):
    """Raised when a connection string cannot be parsed into credentials."""

    def __init__(self, message: str = "Invalid connection string"):
        super().__init__(message, "InvalidConnectionString")


class InvalidAccountKeyError(ConnectionStringError):
    """Raised when AccountKey is not valid base64."""

    def __init__(self, message: str = "AccountKey is not valid base64"):
        super().__init__(message)
        self.error_code = "InvalidAccountKey"


class UriConstructionError(AzBlobError):
    """Raised when a blob URI cannot be built from credentials and path."""

    def __init__(self, message: str = "Invalid blob URI"):
        super().__init__(message, "InvalidUri")
