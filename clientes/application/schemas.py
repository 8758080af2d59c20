from datetime import datetime
from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import Optional

def _reject_nul(value):
    # PostgreSQL text cannot hold NUL characters
    if isinstance(value, str) and "\x00" in value:
        raise ValueError("NUL characters are not allowed")
    return value

class ClienteCreate(BaseModel):
    # Portuguese keys are accepted for older clients
    name: str = Field(max_length=100, validation_alias=AliasChoices("name", "nome"))
    tax_id: str = Field(max_length=14, validation_alias=AliasChoices("taxId", "cpf"))
    address: str = Field(max_length=200, validation_alias=AliasChoices("address", "endereco"))
    email: str = Field(max_length=100)
    password: str = Field(max_length=100)

    @field_validator("*")
    @classmethod
    def no_nul(cls, value):
        return _reject_nul(value)

class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("*")
    @classmethod
    def no_nul(cls, value):
        return _reject_nul(value)

class ClienteRead(BaseModel):
    id: int
    name: str
    tax_id: str = Field(validation_alias=AliasChoices("tax_id", "taxId"), serialization_alias="taxId")
    address: str
    email: str
    created_at: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )

    class Config:
        from_attributes = True

class ApiResponse(BaseModel):
    success: bool
    message: str

class ClienteSummary(BaseModel):
    id: int
    name: str

class LoginResponse(ApiResponse):
    customer: ClienteSummary
