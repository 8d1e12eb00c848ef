from typing import Optional

from pydantic import EmailStr, Field, field_validator

from autoshop.schemas.common import ApiModel, TimestampedRead, reject_null


class TechnicianBase(ApiModel):
    name: str = Field(..., min_length=1, max_length=200, description="Full name")
    email: Optional[EmailStr] = Field(None, description="Email")
    phone: Optional[str] = Field(None, max_length=50, description="Phone")
    specialization: Optional[str] = Field(None, max_length=100, description="E.g. brakes, electrical")


class TechnicianCreate(TechnicianBase):
    pass


class TechnicianUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    specialization: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None

    no_nulls = field_validator("name", "is_active")(reject_null)


class TechnicianRead(TechnicianBase, TimestampedRead):
    is_active: bool
