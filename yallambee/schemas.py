# Pydantic models (request/response DTOs) used by the API layer.
# Keep models minimal and serializable; booking rules live in booking_rules.py.
from pydantic import BaseModel, Field, ConfigDict, field_validator, EmailStr
from typing import List, Literal, Optional
from datetime import date, datetime

# Booking lifecycle states
BookingStatus = Literal["Pending", "Confirmed", "Cancelled"]


def _age_on(dob: date, today: date) -> int:
    years = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        years -= 1
    return years


# Properties
class Location(BaseModel):
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)


# Base attributes for a property listing (shared by create/read)
class PropertyBase(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    description: str = Field(..., min_length=10)
    price: float = Field(..., ge=0)
    availability: List[date] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    location: Location
    age_restriction: int = Field(18, ge=0)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: str) -> str:
        # Trim surrounding whitespace before validation
        if isinstance(v, str):
            v = v.strip()
        return v


# Payload for creating a new property
class PropertyCreate(PropertyBase):
    pass


# Payload for updating a property; only provided fields are changed
class PropertyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=100)
    description: Optional[str] = Field(None, min_length=10)
    price: Optional[float] = Field(None, ge=0)
    availability: Optional[List[date]] = None
    images: Optional[List[str]] = None
    location: Optional[Location] = None
    age_restriction: Optional[int] = Field(None, ge=0)


# Response shape when reading a property from the API
class PropertyRead(PropertyBase):
    id: int
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, obj) -> "PropertyRead":
        # Location is stored as flat columns on the ORM model
        return cls(
            id=obj.id,
            name=obj.name,
            description=obj.description,
            price=obj.price,
            availability=obj.availability or [],
            images=obj.images or [],
            location=Location(city=obj.city, state=obj.state),
            age_restriction=obj.age_restriction,
            created_at=obj.created_at,
        )


class UnavailableDatesResponse(BaseModel):
    property_id: int
    dates: List[date]


# Bookings
# Common booking fields shared by create/read
class BookingBase(BaseModel):
    property_id: int = Field(..., ge=1)
    start_date: date
    end_date: date


# Request payload for creating a booking; status defaults to Pending
class BookingCreate(BookingBase):
    status: Optional[BookingStatus] = None


# Request payload for PUT: every editable field is required
class BookingReplace(BookingBase):
    status: BookingStatus


# Request payload for PATCH: any subset of the editable fields
class BookingPatch(BaseModel):
    property_id: Optional[int] = Field(None, ge=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[BookingStatus] = None


# API response for a booking record
class BookingRead(BookingBase):
    id: int
    user_id: int
    status: BookingStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Authentication and user models
class UserFields(BaseModel):
    first_name: Optional[str] = Field(None, min_length=3, max_length=100)
    last_name: Optional[str] = Field(None, min_length=3, max_length=100)
    phone: Optional[str] = Field(None, pattern=r"^\d{10,15}$")
    dob: Optional[date] = None

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v

    # Account holders must be adults
    @field_validator("dob")
    @classmethod
    def must_be_adult(cls, v: Optional[date]) -> Optional[date]:
        if v is not None and _age_on(v, date.today()) < 18:
            raise ValueError("User must be 18 or older")
        return v


# Request payload for user registration
class UserCreate(UserFields):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)

    # Normalize email input to lowercase without surrounding whitespace
    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.strip().lower()
        return v

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.strip()
        return v


# Request payload for updating a user; only provided fields are changed
class UserUpdate(UserFields):
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    is_admin: Optional[bool] = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
        return v


# API response for a user record
class UserRead(BaseModel):
    id: int
    username: str
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    dob: Optional[date] = None
    is_admin: bool = False
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Request payload for logging in
class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)

    # Normalize email input to lowercase without surrounding whitespace
    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.strip().lower()
        return v


# OAuth2-style token response bundled with the current user profile
class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


# Uploads
class UploadedFile(BaseModel):
    filename: Optional[str] = None
    path: str
    size: int


class UploadResponse(BaseModel):
    success: bool = True
    message: str = "File uploaded successfully."
    file: UploadedFile
