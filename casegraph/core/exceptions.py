class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.original_error = original_error

class APIClientError(AppError):
    """Raised when an external API call fails."""
    pass

class APITimeoutError(APIClientError):
    """Raised when an external API call times out."""
    pass

class ValidationError(AppError):
    """Raised when input validation fails."""
    pass

class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""
    pass

class ExtractionError(AppError):
    """Raised when a candidate source cannot produce usable output for a document."""
    pass

class StoreError(AppError):
    """Raised by a graph store when a single read or write fails."""
    pass

class PersistenceError(AppError):
    """Raised when a store operation still fails after all retries.

    This is the only failure that aborts a batch; the job scheduler is
    expected to retry the whole unit of work.
    """
    pass
