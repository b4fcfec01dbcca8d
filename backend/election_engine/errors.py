from __future__ import annotations


class ElectionError(Exception):
    """Base class for every recoverable error raised by the election engine."""

    code = "election_error"
    status_code = 400

    def __init__(self, message: str = "") -> None:
        self.message = message or self.code
        super().__init__(self.message)


class NotFound(ElectionError):
    code = "not_found"
    status_code = 404


class Forbidden(ElectionError):
    code = "forbidden"
    status_code = 403


class InvalidInput(ElectionError):
    code = "invalid_input"
    status_code = 400


class InvalidState(ElectionError):
    code = "invalid_state"
    status_code = 409


class AlreadyVoted(ElectionError):
    code = "already_voted"
    status_code = 409


__all__ = [
    "ElectionError",
    "NotFound",
    "Forbidden",
    "InvalidInput",
    "InvalidState",
    "AlreadyVoted",
]
