from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_PRIMARY_COLOR = "#2563eb"


class Address(BaseModel):
    cep: str = ""
    street: str = ""
    number: str = ""
    complement: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""


class Company(BaseModel):
    cnpj: str = ""
    name: str = ""
    email: str = ""
    phone: str = ""
    cell: str = ""
    whatsapp: str = ""
    address: Address = Field(default_factory=Address)
    logo_url: str = ""
    primary_color: str = DEFAULT_PRIMARY_COLOR
    signature_url: str = ""


class Client(BaseModel):
    doc: str = Field(default="", description="CNPJ or CPF")
    name: str = ""
    email: str = ""
    phone: str = ""
    cell: str = ""
    whatsapp: str = ""
    address: Address = Field(default_factory=Address)
    hide_contacts: bool = False


class CompanyLookup(BaseModel):
    """Registry data returned by the address-lookup service."""

    name: str = ""
    email: str = ""
    phone: str = ""
    address: Address = Field(default_factory=Address)


__all__ = ["Address", "Client", "Company", "CompanyLookup", "DEFAULT_PRIMARY_COLOR"]
