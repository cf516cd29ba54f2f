from __future__ import annotations

from enum import StrEnum


class UserRole(StrEnum):
    USER = "USER"
    CORRETOR = "CORRETOR"
    ADMIN = "ADMIN"


class SessionState(StrEnum):
    UNREGISTERED = "unregistered"
    REGISTERED = "registered"
    DISCONNECTED = "disconnected"
