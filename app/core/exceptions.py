"""Custom application exceptions."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(AppException):
    """Validation error exception."""

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class NotFoundError(AppException):
    """Resource not found exception."""

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class UnknownDomainError(NotFoundError):
    """A booking domain identifier outside the four known verticals."""

    def __init__(self, domain: str) -> None:
        self.domain = domain
        super().__init__(resource="Booking domain", identifier=domain)


class InvalidFlowUpdate(ValidationError):
    """An update that would leave a flow state invalid."""

    def __init__(self, flow: str, detail: str, errors: list[dict[str, Any]] | None = None) -> None:
        self.flow = flow
        super().__init__(detail=f"Invalid update to {flow}: {detail}", errors=errors)


class ExternalServiceError(AppException):
    """External service error."""

    def __init__(self, service: str, detail: str | None = None) -> None:
        message = f"External service '{service}' is unavailable"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=message)


class CodecError(ValueError):
    """Raised when a tagged envelope cannot be decoded."""

    def __init__(self, kind: str, payload: Any) -> None:
        self.kind = kind
        self.payload = payload
        super().__init__(f"Cannot decode {kind!r} envelope payload {payload!r}")
