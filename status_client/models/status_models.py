"""
Status models for the remote operation.

Both transports carry the same envelope: {"result": "pending" | "completed" | "error"}.
"""

from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from status_client.common.exceptions import InvalidMessageError


class Status(str, Enum):
    """Observed state of the remote operation."""

    PENDING = "pending"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    def __str__(self) -> str:
        return self.value


TERMINAL_STATUSES = frozenset({Status.COMPLETED, Status.ERROR})


class StatusEnvelope(BaseModel):
    """Status message as sent by the service."""

    model_config = ConfigDict(extra="ignore")

    result: Status = Field(..., description="Current operation status")


def parse_status_payload(payload: Union[str, bytes, dict[str, Any]]) -> Status:
    """Decode a status envelope from raw JSON or an already-decoded body.

    Args:
        payload: JSON text/bytes from a socket frame, or a decoded response body

    Returns:
        The status carried by the envelope

    Raises:
        InvalidMessageError: If the payload is not decodable or has no valid result
    """
    try:
        if isinstance(payload, (str, bytes, bytearray)):
            envelope = StatusEnvelope.model_validate_json(payload)
        else:
            envelope = StatusEnvelope.model_validate(payload)
    except ValidationError as e:
        raise InvalidMessageError() from e
    return envelope.result
