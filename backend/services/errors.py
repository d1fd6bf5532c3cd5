"""
Error types shared by the discovery services.

Only the network-facing clients raise the ``UpstreamError`` family; parsing
and filtering are total over their inputs.
"""
from typing import Optional

import requests


class UpstreamError(Exception):
    """An external service (Overpass, Nominatim) could not serve the request."""

    def __init__(self, message: str, service: Optional[str] = None):
        super().__init__(message)
        self.service = service


class ServiceUnavailable(UpstreamError):
    """The service could not be reached."""


class ServiceTimeout(ServiceUnavailable):
    """The service (or its gateway) timed out."""


class ServiceError(UpstreamError):
    """The service answered with a non-success status or an unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None, service: Optional[str] = None):
        super().__init__(message, service=service)
        self.status_code = status_code


class NoCandidatesError(ValueError):
    """A selection was attempted with nothing to choose from."""


def translate_request_error(exc: Exception, service: str) -> UpstreamError:
    """Map a ``requests`` exception onto the upstream error taxonomy."""
    if isinstance(exc, requests.Timeout):
        return ServiceTimeout(f"{service} timed out: {exc}", service=service)
    if isinstance(exc, requests.ConnectionError):
        return ServiceUnavailable(f"{service} unreachable: {exc}", service=service)
    return ServiceUnavailable(f"{service} request failed: {exc}", service=service)


def check_response(resp, service: str) -> None:
    """Raise for non-success responses; 504 from a gateway counts as a timeout."""
    status = resp.status_code
    if 200 <= status < 300:
        return
    if status == 504:
        raise ServiceTimeout(f"{service} gateway timeout", service=service)
    reason = getattr(resp, "reason", "") or ""
    raise ServiceError(f"{service} error: {status} {reason}".rstrip(), status_code=status, service=service)
