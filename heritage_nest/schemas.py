from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Any, Dict, Optional, Tuple, Union
from datetime import datetime

# open-ended listing attributes kept next to the typed columns
MAX_EXTRA_FIELDS = 32

LISTING_FIELDS = (
    "title", "description", "location", "property_type", "price", "starting_bid", "current_bid",
    "bidder_id", "name", "email", "phone",
)
# server-managed; silently dropped from listing payloads
RESERVED_FIELDS = ("_id", "id", "extra", "created_at", "updated_at", "bid_time")


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1)
    phone: Optional[str] = None

class RegisterResponse(BaseModel):
    success: bool
    message: str

class LoginRequest(BaseModel):
    email: str
    password: str

class LoginResponse(BaseModel):
    success: bool
    message: str
    token: str


class PropertyFields(BaseModel):
    """Listing payload for create and partial update.

    Unknown keys are accepted up to ``MAX_EXTRA_FIELDS`` and stored in the
    record's ``extra`` map.
    """
    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    property_type: Optional[str] = None
    price: Optional[float] = Field(None, allow_inf_nan=False)
    starting_bid: Optional[float] = Field(None, allow_inf_nan=False)
    current_bid: Optional[float] = Field(None, allow_inf_nan=False)
    bidder_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @model_validator(mode="after")
    def check_extra_size(self):
        extra = {k: v for k, v in (self.model_extra or {}).items() if k not in RESERVED_FIELDS}
        if len(extra) > MAX_EXTRA_FIELDS:
            raise ValueError(f"at most {MAX_EXTRA_FIELDS} additional fields are allowed")
        return self

    def split(self) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """Return (column values, extra attributes) for the fields the caller sent."""
        data = self.model_dump(exclude_unset=True)
        columns = {k: data[k] for k in LISTING_FIELDS if k in data}
        extra = {k: v for k, v in data.items() if k not in LISTING_FIELDS and k not in RESERVED_FIELDS}
        return columns, extra


class PropertyOut(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., alias="_id")
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    property_type: Optional[str] = None
    price: Optional[float] = None
    starting_bid: Optional[float] = None
    current_bid: Optional[float] = None
    bidder_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    bid_time: Optional[datetime] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

class PropertyFilter(BaseModel):
    budget: Optional[str] = None
    property_type: Optional[str] = None
    location: Optional[str] = None
    search_text: Optional[str] = None


class BidRequest(BaseModel):
    bid_amount: float = Field(..., allow_inf_nan=False)
    bidder_id: Optional[Union[str, int]] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class WriteResult(BaseModel):
    acknowledged: bool = True
    matched_count: int
    modified_count: int

class InsertResult(BaseModel):
    acknowledged: bool = True
    inserted_id: str

class UpdateResponse(BaseModel):
    message: str
    result: WriteResult

class MessageResponse(BaseModel):
    message: str

class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: str

class HealthStatus(BaseModel):
    status: str

class ServerStatus(BaseModel):
    message: str
    timestamp: datetime
