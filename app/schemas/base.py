from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema: reads ORM rows and dataclasses by attribute."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=False,
    )
