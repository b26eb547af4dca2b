"""Pydantic schemas for the process-url endpoint."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ProcessUrlResponse(BaseModel):
    """Metadata derived for a URL. Serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    summary: str
    favicon_url: str
    processed_url: str


class ErrorResponse(BaseModel):
    """Error body returned by the process-url endpoint."""

    error: str
