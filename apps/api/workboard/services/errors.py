from __future__ import annotations


class BoardError(Exception):
    """Base class for failures surfaced to board users as a short message."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(BoardError):
    status_code = 422


class RequestNotFound(BoardError):
    status_code = 404

    def __init__(self, request_id: int):
        super().__init__(f"요청을 찾을 수 없습니다. (id={request_id})")
        self.request_id = request_id


class ConfirmationRequired(BoardError):
    status_code = 400


class GatewayError(BoardError):
    """Store or object storage call failed (network, DB, bucket)."""

    status_code = 502

    def with_context(self, prefix: str) -> "GatewayError":
        return GatewayError(f"{prefix}: {self.message}")
