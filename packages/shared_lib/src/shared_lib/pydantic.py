"""Base pydantic model shared by the API models of every package."""

from pydantic import BaseModel, ConfigDict


class APIBaseModel(BaseModel):
    """Base class for all API models.

    Fields are populated by alias (the wire name) or by attribute name,
    unknown wire fields are ignored and instances are immutable.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    def __str__(self) -> str:
        """Return a formatted JSON representation of the model."""
        return self.model_dump_json(indent=2, by_alias=True)
