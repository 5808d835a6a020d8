"""Core utilities: codec, exceptions, middleware."""

from app.core.codec import Codec, build_default_codec, get_codec
from app.core.exceptions import (
    AppException,
    CodecError,
    ExternalServiceError,
    InvalidFlowUpdate,
    NotFoundError,
    UnknownDomainError,
    ValidationError,
)

__all__ = [
    "Codec",
    "build_default_codec",
    "get_codec",
    "AppException",
    "CodecError",
    "ExternalServiceError",
    "InvalidFlowUpdate",
    "NotFoundError",
    "UnknownDomainError",
    "ValidationError",
]
