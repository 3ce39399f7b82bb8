"""Custom exception hierarchy for iCrop."""

from __future__ import annotations


class ICropError(Exception):
    """Base class for all custom errors raised by iCrop."""


# --- 3-layer hierarchy ---

class DomainError(ICropError):
    """Base class for domain-level errors."""


class InfrastructureError(ICropError):
    """Base class for infrastructure-level errors."""


class ApplicationError(ICropError):
    """Base class for application-level errors."""


# --- Domain errors ---

class InvalidConfigurationError(DomainError, ValueError):
    """Raised when editor, plugin or transformation options fail validation."""


class UnknownTransformationError(DomainError):
    """Raised when a transformation config names an unregistered variant."""


# --- Infrastructure errors ---

class RasterDecodeError(InfrastructureError):
    """Raised when encoded pixel data never materialises into a raster."""


# --- Application errors ---

class PipelineBusyError(ApplicationError):
    """Raised when a transformation is appended while another one is in flight."""


__all__ = [
    "ApplicationError",
    "DomainError",
    "ICropError",
    "InfrastructureError",
    "InvalidConfigurationError",
    "PipelineBusyError",
    "RasterDecodeError",
    "UnknownTransformationError",
]
