from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Literal
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Role = Literal["admin", "client", "partner"]
TaskStatus = Literal["todo", "inprogress", "done"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Record(BaseModel):
    """
    Base for every stored document. Attributes are snake_case in Python and
    camelCase in the store, matching the documents the web client writes.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    id: str = ""
    created_at: datetime = Field(default_factory=utcnow)

    collection: ClassVar[str]

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude={"id"})
