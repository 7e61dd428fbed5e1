"""Typed entities used across the test suite."""

from dataclasses import dataclass, field
from typing import Any, NamedTuple

from pydantic import BaseModel

from recsan import NOT_LOADED


@dataclass
class Hospital:
    id: int
    name: str
    phone: str | None = None
    address: str | None = None
    rating: float | None = None
    rooms: Any = field(default_factory=lambda: NOT_LOADED)


class Doctor(BaseModel):
    id: int
    name: str
    email: str
    password: str


class Room(NamedTuple):
    number: int
    floor: int
    hospital: Any
