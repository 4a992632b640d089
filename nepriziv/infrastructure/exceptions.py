"""
Custom exceptions for the Infrastructure layer.
"""

from typing import Optional


class InfrastructureError(Exception):
    """Base class for exceptions in the infrastructure layer."""
    pass


class AIGatewayNotConfiguredError(InfrastructureError):
    """Raised when no AI gateway API key is configured."""

    def __init__(self, message: str = "AI_GATEWAY_API_KEY is not configured"):
        super().__init__(message)


class AIGatewayError(InfrastructureError):
    """Non-2xx answer from the AI gateway."""

    def __init__(self, status: int, body: Optional[str] = None):
        self.status = status
        self.body = body or ""
        super().__init__(f"AI gateway error {status}: {self.body[:200]}")

    @property
    def is_rate_limited(self) -> bool:
        return self.status == 429

    @property
    def is_payment_required(self) -> bool:
        return self.status == 402


class NotificationError(InfrastructureError):
    """Email delivery failed."""
    pass


class StorageError(InfrastructureError):
    """Object storage operation failed."""
    pass
