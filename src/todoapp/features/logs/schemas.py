"""Schemas for client log ingestion."""

from pydantic import BaseModel, ConfigDict


class ClientLogEntry(BaseModel):
    """
    Log entry posted by a client.

    ``level`` and ``message`` are checked by the handler; any other keys
    (``context``, ``error``, ``metadata``, ``@timestamp``...) are kept as sent.
    """

    model_config = ConfigDict(extra="allow")

    level: str | None = None
    message: str | None = None
