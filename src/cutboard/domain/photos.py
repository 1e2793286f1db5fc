"""Domain models for progress photos."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class StoredObject:
    """Object listed from photo storage."""

    key: str
    updated_at: datetime | None


@dataclass(frozen=True)
class PhotoInfo:
    """Progress photo exposed to clients."""

    url: str
    key: str
    date: str
    uploaded_at: str
