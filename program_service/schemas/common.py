from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class StrictCamelModel(CamelModel):
    """Shape of model-generated documents. No type coercion: repairs belong to the normalizer."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, strict=True)
