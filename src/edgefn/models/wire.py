"""
Shared base for models that travel as camelCase JSON.
"""

from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    def to_wire(self) -> dict[str, Any]:
        """Dump with wire names, keeping only the fields that were actually supplied."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True, warnings=False)
