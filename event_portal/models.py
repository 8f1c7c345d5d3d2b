# -*- coding: utf-8 -*-
"""Domain models: enums and dataclasses."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class ActorType(str, enum.Enum):
    ADMIN = "admin"
    COMPANY = "company"


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"


class StudyStatus(str, enum.Enum):
    STUDENT = "student"
    GRADUATE = "graduate"


@dataclass
class Actor:
    id: str
    type: ActorType
    name: str

    @property
    def is_admin(self) -> bool:
        return self.type == ActorType.ADMIN

    def to_session(self) -> dict:
        return {'user_id': self.id, 'user_type': self.type.value, 'user_name': self.name}


@dataclass
class Company:
    id: str
    name: str
    username: str
    password_hash: str
    image: Optional[str] = None
    enabled: bool = True

    def public_dict(self) -> dict:
        return {'id': self.id, 'name': self.name, 'username': self.username,
                'image': self.image, 'enabled': self.enabled}


@dataclass
class Event:
    name: str
    company: str
    image: Optional[str] = None
    enabled: bool = True
    registrations: int = 0

    @property
    def id(self) -> str:
        return self.name

    def to_dict(self) -> dict:
        return {'id': self.id, 'name': self.name, 'company': self.company,
                'registrations': self.registrations, 'image': self.image,
                'enabled': self.enabled}


@dataclass
class Registration:
    name: str
    phone: str
    email: str
    gender: str
    college: str
    status: str
    national_id: str
    registered_at: str = ''

    def to_dict(self) -> dict:
        return {'name': self.name, 'phone': self.phone, 'email': self.email,
                'gender': self.gender, 'college': self.college, 'status': self.status,
                'nationalId': self.national_id, 'registeredAt': self.registered_at}


@dataclass
class TableRegion:
    """Row range of one event inside a company sheet (0-based, inclusive)."""
    name: str
    name_row: int
    header_row: Optional[int] = None
    data_row_start: Optional[int] = None
    data_row_end: Optional[int] = None
    metadata_row: Optional[int] = None

    @property
    def last_row(self) -> int:
        if self.data_row_end is not None:
            return self.data_row_end
        if self.header_row is not None:
            return self.header_row
        return self.name_row

    @property
    def data_rows(self) -> range:
        if self.data_row_start is None:
            return range(0)
        return range(self.data_row_start, self.data_row_end + 1)

    @property
    def registration_rows(self) -> range:
        rows = self.data_rows
        if self.metadata_row is not None and rows and rows.start == self.metadata_row:
            return rows[1:]
        return rows

    @property
    def registrations(self) -> int:
        return max(0, len(self.registration_rows))
