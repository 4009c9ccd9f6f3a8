"""
Shared pydantic base for documents stored in the tickets collection
"""
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes in Python, camelCase keys in MongoDB and JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def with_changes(self, **changes: Any):
        """Return a re-validated copy with the given fields replaced."""
        return self.model_validate({**self.model_dump(), **changes})

    def to_document(self) -> Dict[str, Any]:
        """Serialize for storage (camelCase keys, unset optionals omitted)."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_response(self) -> Dict[str, Any]:
        """Serialize for a JSON response body."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
