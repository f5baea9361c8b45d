"""
Marathon Event API — Registration & Tip Schemas
=================================================

What:  Request and response contracts for registrations and marathon tips.

Registrations keep `marathon_id` as the string the client sent; it is never
converted to an ObjectId before storage, so lookups by marathon compare
strings.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from marathon_api.schemas.common import reject_identifier_field, reject_null


class RegistrationCreate(BaseModel):
    """Body of POST /registrations."""
    model_config = ConfigDict(extra="allow")

    marathon_id: str = Field(min_length=1, description="Identifier of the marathon")
    email: Optional[str] = Field(default=None, description="Participant email")
    marathon_title: Optional[str] = Field(
        default=None, description="Copy of the marathon title, used for search"
    )

    @model_validator(mode="before")
    @classmethod
    def reject_id(cls, data):
        return reject_identifier_field(data)

    def to_document(self) -> dict:
        return self.model_dump(exclude_unset=True)


class RegistrationUpdate(BaseModel):
    """Body of PATCH /registrations/{id}."""
    model_config = ConfigDict(extra="allow")

    marathon_id: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    marathon_title: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def reject_id(cls, data):
        return reject_identifier_field(data)

    @field_validator("marathon_id")
    @classmethod
    def marathon_id_not_null(cls, v: Optional[str]) -> str:
        return reject_null(v)

    def to_patch(self) -> dict:
        return self.model_dump(exclude_unset=True)


class RegistrationDocument(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(alias="_id")


class TipDocument(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(alias="_id")
