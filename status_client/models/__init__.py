"""
Status models package.

Wire-level types shared by the push and poll transports.
"""

from status_client.models.status_models import (
    TERMINAL_STATUSES,
    Status,
    StatusEnvelope,
    parse_status_payload,
)

__all__ = ["Status", "StatusEnvelope", "TERMINAL_STATUSES", "parse_status_payload"]
