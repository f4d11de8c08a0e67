"""Exception types raised by the extraction and tailoring handlers."""
from __future__ import annotations


class CareerDeskError(Exception):
    """Base class; ``status_code`` is the HTTP status the API answers with."""

    status_code = 500


class AuthenticationError(CareerDeskError):
    status_code = 401


class ConfigurationError(CareerDeskError):
    status_code = 500


class UpstreamServiceError(CareerDeskError):
    """The mail provider or the text-generation API answered with a failure."""

    status_code = 502


class PersistenceError(CareerDeskError):
    status_code = 500


class NotFoundError(CareerDeskError):
    status_code = 404
