"""
Marathon Event API — Marathon Schemas
=======================================

What:  Request and response contracts for the marathons collection.
How:   Known fields are typed and validated; any additional descriptive
       field (location, distance, image, ...) is accepted and stored as-is
       (`extra="allow"`).

Field naming follows the stored documents (camelCase), since the same
names are used in queries and by existing frontends.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from marathon_api.schemas.common import reject_identifier_field, reject_null, validate_iso_date


class MarathonCreate(BaseModel):
    """Body of POST /marathons."""
    model_config = ConfigDict(extra="allow")

    title: str = Field(min_length=1, description="Event title")
    startRegistrationDate: Optional[str] = Field(default=None, description="YYYY-MM-DD")
    endRegistrationDate: Optional[str] = Field(default=None, description="YYYY-MM-DD")
    marathonStartDate: Optional[str] = Field(default=None, description="YYYY-MM-DD")
    email: Optional[str] = Field(default=None, description="Owner email")
    totalRegistrationCount: int = Field(default=0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def reject_id(cls, data):
        return reject_identifier_field(data)

    @field_validator("startRegistrationDate", "endRegistrationDate", "marathonStartDate")
    @classmethod
    def validate_dates(cls, v: Optional[str]) -> Optional[str]:
        return validate_iso_date(v)

    def to_document(self) -> dict:
        """Submitted fields plus an initialised registration counter."""
        doc = self.model_dump(exclude_unset=True)
        doc.setdefault("totalRegistrationCount", 0)
        return doc


class MarathonUpdate(BaseModel):
    """Body of PATCH /marathons/{id}; only the supplied fields are written."""
    model_config = ConfigDict(extra="allow")

    title: Optional[str] = Field(default=None, min_length=1)
    startRegistrationDate: Optional[str] = None
    endRegistrationDate: Optional[str] = None
    marathonStartDate: Optional[str] = None
    email: Optional[str] = None
    totalRegistrationCount: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def reject_id(cls, data):
        return reject_identifier_field(data)

    @field_validator("title")
    @classmethod
    def title_not_null(cls, v: Optional[str]) -> str:
        return reject_null(v)

    @field_validator("startRegistrationDate", "endRegistrationDate", "marathonStartDate")
    @classmethod
    def validate_dates(cls, v: Optional[str]) -> Optional[str]:
        return validate_iso_date(v)

    def to_patch(self) -> dict:
        return self.model_dump(exclude_unset=True)


class MarathonDocument(BaseModel):
    """A stored marathon as returned by the API (`_id` as hex string)."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(alias="_id")
