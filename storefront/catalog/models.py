from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Product(BaseModel):
    """Catalog record as served by the storefront backend. Read-only here."""

    # backends may send numeric ids
    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    # join key for the recommendation service
    external_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("externalId", "external_id"),
        serialization_alias="externalId",
    )
    name: str = ""
    brand: str = ""
    category: str = ""
    price: float | None = None
    image: str | None = None
