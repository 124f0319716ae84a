"""Base Pydantic model configuration shared by engine records."""

from pydantic import BaseModel, ConfigDict


class InfrastructureModel(BaseModel):
    """Base model for stored records and delivery payloads.

    - Enums stay enum objects (records compare on enum members)
    - Fields accept both name and alias
    - Assignment is validated
    - Instances can be built from attribute-bearing objects
    """

    model_config = ConfigDict(
        use_enum_values=False,
        populate_by_name=True,
        validate_assignment=True,
        from_attributes=True,
    )
