"""Value object base."""

from pydantic import BaseModel, ConfigDict


class ValueObject(BaseModel):
    """Immutable value, equal to any other with the same fields."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
