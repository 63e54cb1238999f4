"""Domain model base."""

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Frozen snapshot; derive new states with ``model_copy(update=...)``."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
