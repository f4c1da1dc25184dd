from typing import Annotated, Any, Optional

from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _stringify_object_id(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    return value


# Mongo ids travel as strings everywhere outside the driver
PyObjectId = Annotated[str, BeforeValidator(_stringify_object_id)]


class MongoBaseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    @classmethod
    def from_mongo(cls, document: Optional[dict]):
        if not document:
            return None
        return cls.model_validate(document)

    def to_mongo(self) -> dict:
        """Document ready for insert_one (no _id; Mongo assigns it)."""
        return self.model_dump(exclude={"id"})
