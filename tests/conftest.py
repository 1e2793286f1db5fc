"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any

import pytest

from cutboard.adapters.sync_client import SyncClient, SyncError
from cutboard.config import Settings
from cutboard.containers import AppContainer
from cutboard.domain.document import utc_timestamp
from cutboard.domain.photos import StoredObject
from cutboard.domain.plans import Meal, MealItem, MealPlan
from cutboard.services.admin import AdminRepository, AdminService
from cutboard.services.auth import AuthService, SessionVerifier
from cutboard.services.photos import ObjectStorage, PhotoService
from cutboard.services.sync import SyncService, UserDataRepository

USER_ID = "user-1"
OTHER_USER_ID = "user-2"
TODAY = date(2025, 3, 10)
PUBLIC_URL = "https://photos.example.com"


@dataclass
class InMemoryUserDataRepository(UserDataRepository):
    rows: dict[str, str] = field(default_factory=dict)
    fail_writes: bool = False

    def get_user_data(self, user_id: str) -> str | None:
        return self.rows.get(user_id)

    def save_user_data(self, user_id: str, data: str) -> None:
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        self.rows[user_id] = data


@dataclass
class InMemoryObjectStorage(ObjectStorage):
    objects: dict[str, bytes] = field(default_factory=dict)
    updated_at: dict[str, datetime] = field(default_factory=dict)
    content_types: dict[str, str] = field(default_factory=dict)

    def list_objects(self, prefix: str) -> list[StoredObject]:
        folder = prefix.rstrip("/") + "/"
        return [
            StoredObject(key=key, updated_at=self.updated_at.get(key))
            for key in self.objects
            if key.startswith(folder) and "/" not in key.removeprefix(folder)
        ]

    def upload(self, key: str, content: bytes, content_type: str) -> None:
        self.objects[key] = content
        self.content_types[key] = content_type
        self.updated_at[key] = datetime.now(tz=UTC)

    def download(self, key: str) -> bytes:
        return self.objects[key]

    def delete(self, key: str) -> None:
        self.objects.pop(key, None)


@dataclass
class FakeSessionVerifier(SessionVerifier):
    tokens: dict[str, str] = field(
        default_factory=lambda: {"token-1": USER_ID, "token-2": OTHER_USER_ID}
    )

    def verify(self, token: str) -> str | None:
        return self.tokens.get(token)


@dataclass
class InMemoryAdminRepository(AdminRepository):
    documents: list[dict[str, object]] = field(default_factory=list)
    fail: bool = False

    def count_user_documents(self) -> int:
        if self.fail:
            raise RuntimeError("connection refused")
        return len(self.documents)

    def list_user_documents(self, limit: int) -> list[dict[str, object]]:
        return self.documents[:limit]


@dataclass
class FakeSyncClient(SyncClient):
    remote: dict[str, Any] | None = None
    fail_fetch: bool = False
    fail_push: bool = False
    pushed: list[dict[str, Any]] = field(default_factory=list)
    closed: bool = False
    delays: list[float] = field(default_factory=list)

    async def fetch(self) -> dict[str, Any] | None:
        if self.fail_fetch:
            raise SyncError("offline")
        return self.remote

    async def push(self, document: dict[str, Any]) -> str:
        if self.delays:
            await asyncio.sleep(self.delays.pop(0))
        if self.fail_push:
            raise SyncError("offline")
        last_sync = utc_timestamp()
        self.remote = {**document, "lastSync": last_sync}
        self.pushed.append(document)
        return last_sync

    async def close(self) -> None:
        self.closed = True


@dataclass
class FakeClock:
    now: float = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        admin_token="admin-token",
        photos_public_url=PUBLIC_URL,
    )


@pytest.fixture
def user_data_repository() -> InMemoryUserDataRepository:
    return InMemoryUserDataRepository()


@pytest.fixture
def storage() -> InMemoryObjectStorage:
    return InMemoryObjectStorage()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": "Bearer token-1"}


@pytest.fixture
def container(
    settings: Settings,
    user_data_repository: InMemoryUserDataRepository,
    storage: InMemoryObjectStorage,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        auth_service=AuthService(FakeSessionVerifier()),
        sync_service=SyncService(repository=user_data_repository, storage=storage),
        photo_service=PhotoService(storage=storage, public_base_url=PUBLIC_URL),
        admin_service=AdminService(
            admin_repository=InMemoryAdminRepository(),
            config_flags=settings.config_flags(),
        ),
        close_resources=close_resources,
    )


def make_item(  # noqa: PLR0913
    item_id: str,
    name: str = "Hähnchenbrust",
    quantity: float = 100,
    unit: str = "g",
    per: tuple[float, float, float, float] = (100, 20, 0, 2),
    alternatives: list[MealItem] | None = None,
    group_name: str | None = None,
) -> MealItem:
    calories, protein, carbs, fat = per
    return MealItem(
        id=item_id,
        name=name,
        quantity=quantity,
        unit=unit,
        calories_per=calories,
        protein_per=protein,
        carbs_per=carbs,
        fat_per=fat,
        alternatives=alternatives,
        group_name=group_name,
    )


def make_plan(plan_id: str, name: str, *items: MealItem) -> MealPlan:
    return MealPlan(
        id=plan_id,
        name=name,
        meals=[
            Meal(id=f"{plan_id}-meal", name="Mittag", time="13:00", items=list(items))
        ],
    )
