"""Base model configuration for declarative structures."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable model that may hold callables and class objects."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
