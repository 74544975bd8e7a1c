"""Domain errors rendered as JSON by the app-level exception handler."""

from core.exceptions.base import (
    CustomException,
    BadRequestException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    ConflictException,
)

__all__ = [
    "CustomException",
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "ConflictException",
]