"""Custom exception classes for the catalog."""


class CatalogException(Exception):
    """
    Base exception class for all catalog errors.
    """
    pass


class UpdateNotFoundError(CatalogException):
    """
    Raised when a requested update file or KB entry does not exist.
    """
    pass


class InvalidCredentialsError(CatalogException):
    """
    Raised when upload credentials are missing or invalid.
    """
    pass


class UploadFailedError(CatalogException):
    """
    Raised when an upload could not be stored in the primary metadata store.
    """
    pass


class PersistenceError(CatalogException):
    """
    Raised when the backing store rejects a read or write.
    """
    pass
