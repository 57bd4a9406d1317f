# backend/app/core/exceptions.py
"""
Domain-specific exceptions for the booking engine.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Iterable, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException carrying the standard error detail."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        # Storage details stay in the logs
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": "An error occurred processing your request",
                "code": self.code,
                "details": {},
            },
        )


# Specific business exceptions


class SlotConflictException(ConflictException):
    """Raised when the requested interval is no longer free at commit time."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message
            or "This time slot is no longer available. Please refresh availability and try again",
            code="SLOT_CONFLICT",
            details=details or {},
        )


class InvalidTransitionException(ConflictException):
    """Raised when a booking status change is not permitted."""

    def __init__(
        self,
        current: str,
        target: str,
        allowed: Iterable[str] = (),
        message: Optional[str] = None,
    ):
        allowed_list = sorted(allowed)
        super().__init__(
            message=message or f"Cannot change booking status from {current} to {target}",
            code="INVALID_TRANSITION",
            details={"from": current, "to": target, "allowed": allowed_list},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
