"""Base model configuration for descriptor records."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base model with standard configuration.

    Descriptors are immutable once constructed and reject unknown keys so a
    misspelled manifest field fails loudly instead of being ignored.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")
