from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Champs snake_case côté Python, camelCase côté JSON (customerName, itemId...)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_client(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
