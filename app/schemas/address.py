from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel

REQUIRED_ADDRESS_FIELDS = ["street", "city", "state"]


class Coordinates(CamelModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)


class AddressFields(CamelModel):
    street: str | None = Field(default=None, max_length=255)
    neighbourhood: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    country: str | None = Field(default=None, max_length=100)
    postcode: str | None = Field(default=None, max_length=20)

    def missing_fields(self) -> list[str]:
        return [name for name in REQUIRED_ADDRESS_FIELDS if not (getattr(self, name) or "").strip()]


class AddressUpdate(CamelModel):
    address: AddressFields | None = None
    coordinates: Coordinates | None = None


class AddressOut(CamelModel):
    street: str
    neighbourhood: str | None = None
    city: str
    state: str
    country: str
    postcode: str | None = None
    full_address: str
    has_coordinates: bool
    source: str
    accuracy: str
    updated_at: datetime | None = None


class AddressResponse(CamelModel):
    success: bool = True
    message: str
    address: AddressOut | None
    has_address: bool = True
