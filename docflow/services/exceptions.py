class ServiceError(Exception):
    """Raised when an external AI service call fails."""


class ServiceNetworkError(ServiceError):
    """Raised when the provider call fails due to network/infrastructure issues or quota."""


class ServiceResponseError(ServiceError):
    """Raised when the provider answers with an empty or unusable response."""
