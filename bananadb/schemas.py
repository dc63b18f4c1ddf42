from pydantic import BaseModel, ConfigDict, StrictStr, StrictInt, StrictFloat, Field, model_validator
from typing import Optional, Union

Number = Union[StrictInt, StrictFloat]

# Optional listing fields that have a column in car_listings
LISTING_OPTIONAL_FIELDS = (
    "co2", "fuel_type", "first_registration_date", "power_kw", "power_hp", "gear_type",
    "number_of_doors", "number_of_seats", "seller", "location", "listing_url", "listing_date",
)

class ParsedCarListing(BaseModel):
    """A listing extracted by the AI provider, validated but not yet persisted.

    Only the five core fields are type checked. Anything else the provider
    returns is kept as-is in the model's extras.
    """
    model_config = ConfigDict(extra="allow")

    make: StrictStr
    model: StrictStr
    year: Number
    mileage: Number
    price: Number

    def extra_fields(self) -> dict:
        return dict(self.model_extra or {})

    def column_values(self) -> dict:
        data = {"make": self.make, "model": self.model, "year": self.year,
                "mileage": self.mileage, "price": self.price}
        extras = self.extra_fields()
        for name in LISTING_OPTIONAL_FIELDS:
            if extras.get(name) is not None:
                data[name] = extras[name]
        return data

class ProjectIn(BaseModel):
    make: str = Field(min_length=1, max_length=100)
    model: str = Field(min_length=1, max_length=100)
    year_range_start: int = 2020
    year_range_end: int = 2024
    engine_capacity_start: int = 0
    engine_capacity_end: int = 0
    fuel_type: str = "Petrol"
    co2_emissions: float = 0
    doors_config: str = "all door configs"
    transport_costs: int = 0
    isv: int = 0
    portuguese_registration: int = 0
    german_plates_insurance: int = 0

    @model_validator(mode="after")
    def check_ranges(self):
        if self.year_range_start > self.year_range_end:
            raise ValueError("Start year cannot be greater than end year")
        if self.engine_capacity_start > self.engine_capacity_end:
            raise ValueError("Start engine capacity cannot be greater than end capacity")
        return self

class DataSourceIn(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    country: str = Field(min_length=1, max_length=100)

    @model_validator(mode="before")
    @classmethod
    def strip_values(cls, data):
        if isinstance(data, dict):
            return {k: v.strip() if isinstance(v, str) else v for k, v in data.items()}
        return data

class SignUpIn(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=6)
    full_name: Optional[str] = None
