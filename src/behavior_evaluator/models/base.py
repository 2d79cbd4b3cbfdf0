"""Base Pydantic schema for the project.

Provides a common base class for all Pydantic models in the
behavior-evaluator package with shared configuration and validation behavior.
"""

from pydantic import BaseModel, ConfigDict

__all__ = ["BaseSchema", "FrozenSchema"]


class BaseSchema(BaseModel):
    """Base model for all Pydantic schemas.

    Provides common configuration for all models in the project:
    - from_attributes: Enable construction from arbitrary objects
    - str_strip_whitespace: Automatically strip whitespace from strings
    - ser_json_inf_nan: Emit unbounded ratios as "Infinity" in JSON
    """

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        ser_json_inf_nan="strings",
    )


class FrozenSchema(BaseSchema):
    """Base model for records that are read-only once built.

    Session records and timeline events are shared by reference between
    evaluators, so attribute assignment is rejected.
    """

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        ser_json_inf_nan="strings",
        frozen=True,
    )
