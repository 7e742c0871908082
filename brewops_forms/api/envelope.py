"""Response envelope used by most BrewOps endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class ApiEnvelope(BaseModel):
    """``{success, data, message}`` wrapper around a response payload.

    Endpoints that return a bare value are wrapped with success=True.
    """

    success: bool = True
    data: Any = None
    message: str | None = None

    model_config = ConfigDict(extra="allow")

    @classmethod
    def from_payload(cls, payload: Any) -> "ApiEnvelope":
        """Build an envelope from a decoded JSON body."""
        if isinstance(payload, dict) and ("success" in payload or "data" in payload):
            return cls.model_validate(payload)
        return cls(success=True, data=payload)

    def items(self, *keys: str) -> list[Any]:
        """Return the payload as a list of records.

        The backend sends lists either bare or wrapped under ``data`` or an
        entity-specific key such as ``suppliers``.

        Args:
            keys: Extra wrapper keys to look under, in order.

        Returns:
            The list of records, or an empty list.
        """
        data = self.data
        if isinstance(data, list):
            return data
        extra = self.model_extra or {}
        for key in keys:
            if isinstance(data, dict) and isinstance(data.get(key), list):
                return data[key]
            if isinstance(extra.get(key), list):
                return extra[key]
        return []
