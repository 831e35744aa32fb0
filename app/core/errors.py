"""
Error taxonomy for the placement core.

Services raise these; the transport layer maps each kind to a status code
in one exception handler (see app/main.py). None of them is fatal.
"""


class PlacementError(Exception):
    """Base class for expected, caller-facing failures."""

    kind = "error"
    status_code = 400

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail or self.__class__.__name__


class NotFound(PlacementError):
    kind = "not_found"
    status_code = 404


class ValidationError(PlacementError):
    kind = "validation_error"
    status_code = 400


class Conflict(PlacementError):
    kind = "conflict"
    status_code = 409


class Ineligible(PlacementError):
    kind = "ineligible"
    status_code = 400


class Forbidden(PlacementError):
    kind = "forbidden"
    status_code = 403


class InvalidState(PlacementError):
    kind = "invalid_state"
    status_code = 409


class Unauthenticated(PlacementError):
    kind = "unauthenticated"
    status_code = 401


class StoreUnavailable(Exception):
    """The record store could not be reached. Not part of the taxonomy above."""

    status_code = 503
