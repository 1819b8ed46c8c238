"""Base Pydantic model configuration for roamrpc protocol models.

All protocol models inherit from RoamBaseModel to ensure consistent behavior:
- Immutability (frozen=True), so stamping a payload always yields a copy
- Population by field name or by the protocol's wire alias
- Strict validation of unknown fields unless a payload opts out
"""

from pydantic import BaseModel, ConfigDict


class RoamBaseModel(BaseModel):
    """Base model for all roamrpc protocol entities.

    Example:
        >>> class Thing(RoamBaseModel):
        ...     dev_eui: str = Field(alias="DevEUI")
        >>> Thing(dev_eui="0102").model_dump(by_alias=True)
        {'DevEUI': '0102'}
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        # Accept both dev_eui= and DevEUI=
        populate_by_name=True,
        use_enum_values=False,
        validate_default=True,
    )

    def to_wire(self) -> bytes:
        """Encode as the protocol's JSON document.

        Fields never set are omitted; a field set to null, including an
        extra field a peer sent, is written back as null.
        """
        return self.model_dump_json(by_alias=True, exclude_unset=True).encode("utf-8")
