from datetime import datetime, timezone
from typing import ClassVar

from pydantic import BaseModel, model_validator
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DashModel(BaseModel):
    """Base for every wire model: camelCase on the wire, snake_case accepted on input."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class PartialUpdate(DashModel):
    """PATCH payload. Fields listed in ``non_nullable`` may be omitted but never sent as null."""

    non_nullable: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        nulls = sorted(f for f in self.model_fields_set & self.non_nullable if getattr(self, f) is None)
        if nulls:
            raise ValueError(f"{', '.join(nulls)} cannot be null")
        return self
