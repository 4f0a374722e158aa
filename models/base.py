# models/base.py

from typing import Any, Dict
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RecordModel(BaseModel):
    """
    Base for every persisted record.

    Python code uses snake_case attributes; the durable JSON layout (and the
    bundled seed data) uses camelCase keys, so both are accepted on input and
    camelCase is written on output.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
