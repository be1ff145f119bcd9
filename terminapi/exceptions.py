"""Termin API custom exceptions."""

class TerminAPIError(Exception):
    """Base exception for Termin API."""
    pass

class ConfigurationError(TerminAPIError):
    """Raised when configuration is invalid."""
    pass

class ValidationError(TerminAPIError):
    """Raised when a request or collection fails validation before use."""
    pass

class ExecutionError(TerminAPIError):
    """Raised when a request could not be sent or no response was received."""
    pass

class PersistenceError(TerminAPIError):
    """Raised when reading or writing the storage directory fails."""
    pass

class ResourceNotFoundError(PersistenceError):
    """Raised when a requested collection, request or environment is not stored."""
    pass

class CollectionImportError(TerminAPIError):
    """Raised when an import source cannot be read or is not a valid collection document."""
    pass
