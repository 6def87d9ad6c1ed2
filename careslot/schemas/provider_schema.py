"""Provider Directory data models."""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class WorkingHoursPayload(BaseModel):
    """One row of a provider's weekly working hours, as authored."""
    model_config = ConfigDict(populate_by_name=True)

    day: str
    start_time: Optional[str] = Field(default=None, alias="startTime")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    is_available: bool = Field(default=False, alias="isAvailable")


class ServiceItem(BaseModel):
    """A service from the provider's catalog."""
    id: Optional[str] = None
    name: str
    category: Optional[str] = None
    price: Optional[float] = None


class ProviderAddress(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None

    def one_line(self) -> str:
        parts = [self.street, self.city, self.state, self.country]
        return ", ".join(p for p in parts if p)


class ProviderRecord(BaseModel):
    """Provider record consumed from the directory."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str = Field(alias="provider_name")
    address: Union[ProviderAddress, str, None] = None
    image: Optional[str] = Field(default=None, alias="logo")
    working_hours: list[WorkingHoursPayload] = Field(default_factory=list)
    services: list[ServiceItem] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_mongo_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and "id" not in data and "_id" in data:
            return {**data, "id": str(data["_id"])}
        return data

    @field_validator("services", mode="before")
    @classmethod
    def _coerce_services(cls, value: Any) -> Any:
        # The directory lists services either as plain names or as objects.
        if not isinstance(value, list):
            return value
        return [{"name": item} if isinstance(item, str) else item for item in value]

    @property
    def address_line(self) -> str:
        if isinstance(self.address, ProviderAddress):
            return self.address.one_line()
        return self.address or ""

    @property
    def default_service(self) -> Optional[ServiceItem]:
        return self.services[0] if self.services else None
