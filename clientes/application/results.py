"""Outcomes of the customer operations, independent of HTTP."""
from dataclasses import dataclass
from enum import Enum

class FailureKind(str, Enum):
    UNAVAILABLE = "unavailable"
    DUPLICATE_EMAIL = "duplicate_email"
    DUPLICATE_TAX_ID = "duplicate_tax_id"
    INVALID_CREDENTIALS = "invalid_credentials"
    STORE_ERROR = "store_error"

STATUS_CODES = {
    FailureKind.UNAVAILABLE: 503,
    FailureKind.DUPLICATE_EMAIL: 409,
    FailureKind.DUPLICATE_TAX_ID: 409,
    FailureKind.INVALID_CREDENTIALS: 401,
    FailureKind.STORE_ERROR: 500,
}

@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

@dataclass(frozen=True)
class Registered:
    pass

@dataclass(frozen=True)
class Authenticated:
    id: int
    name: str

DATABASE_UNAVAILABLE = Failure(FailureKind.UNAVAILABLE, "database unavailable")
