"""Registrar Schemas - admission requests and membership answers."""

from pydantic import BaseModel, Field, field_validator


class RegistrarCreate(BaseModel):
    identity: str = Field(min_length=1, max_length=255)

    @field_validator("identity")
    @classmethod
    def strip_identity(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("identity cannot be empty or whitespace")
        return v


class RegistrarStatus(BaseModel):
    identity: str
    is_registrar: bool


class RegistrarAdded(BaseModel):
    identity: str
    added: bool


class RegistrarList(BaseModel):
    registrars: list[str]
