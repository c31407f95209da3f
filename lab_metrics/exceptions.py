class MetricsError(Exception):
    """Base exception for the lab metrics engine.

    Subclasses only override ``default_message``; every error carries an
    optional machine-readable ``code`` and a ``details`` payload.
    """

    default_message = "An error occurred in the lab metrics engine"

    def __init__(self, message=None, code=None, details=None):
        """Initialize the exception.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
        """
        self.message = message or self.default_message
        self.code = code
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self):
        """Convert the exception to a dictionary."""
        error_dict = {
            'error': self.__class__.__name__,
            'message': self.message,
        }

        if self.code:
            error_dict['code'] = self.code

        if self.details:
            error_dict['details'] = self.details

        return error_dict


class ConfigError(MetricsError):
    """Invalid or unreadable settings."""
    default_message = "Configuration error"


class DatabaseError(MetricsError):
    """A record query failed in the database layer."""
    default_message = "Database error"


class ValidationError(MetricsError):
    """Invalid input at the engine or service boundary."""
    default_message = "Validation error"


class FetchError(MetricsError):
    """Monthly records could not be retrieved."""
    default_message = "Fetch error"


class FetchTimeoutError(FetchError):
    """A fetch did not complete within the configured timeout."""
    default_message = "Fetch timed out"


class CalculationError(MetricsError):
    """A series or aggregate is not in the shape a calculation expects."""
    default_message = "Calculation error"
