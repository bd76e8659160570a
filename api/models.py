from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime


# User Models
class UserCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    email: str
    password: str
    role: str = "user"


class UserUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: str = "user"


class UserMessage(BaseModel):
    message: str
    user: UserResponse


# Auth Models
class UserLogin(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    message: str
    token: str
    role: str


# Event Models
class EventResponse(BaseModel):
    id: str
    userId: Optional[str] = None
    location: Optional[str] = None
    eventName: Optional[str] = None
    date: Optional[datetime] = None
    photos: List[str] = []
    videos: List[str] = []


class EventMessage(BaseModel):
    message: str
    event: EventResponse


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class EventPage(BaseModel):
    events: List[EventResponse]
    pagination: Pagination


class EventList(BaseModel):
    events: List[EventResponse]


class HealthResponse(BaseModel):
    status: str
