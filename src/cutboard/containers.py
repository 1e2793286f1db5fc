"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from cutboard.adapters.supabase_admin_repository import SupabaseAdminRepository
from cutboard.adapters.supabase_object_storage import SupabaseObjectStorage
from cutboard.adapters.supabase_session_verifier import SupabaseSessionVerifier
from cutboard.adapters.supabase_user_data_repository import (
    SupabaseUserDataRepository,
)
from cutboard.config import Settings
from cutboard.services.admin import AdminService
from cutboard.services.auth import AuthService
from cutboard.services.photos import PhotoService
from cutboard.services.sync import SyncService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_service: AuthService
    sync_service: SyncService
    photo_service: PhotoService
    admin_service: AdminService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    storage = SupabaseObjectStorage(supabase_client, resolved_settings.photos_bucket)
    user_data_repository = SupabaseUserDataRepository(
        supabase_client, resolved_settings.user_data_table
    )
    admin_repository = SupabaseAdminRepository(
        supabase_client, resolved_settings.user_data_table
    )
    public_base_url = (
        resolved_settings.photos_public_url
        or storage.default_public_url(resolved_settings.supabase_url)
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=resolved_settings,
        auth_service=AuthService(SupabaseSessionVerifier(supabase_client)),
        sync_service=SyncService(repository=user_data_repository, storage=storage),
        photo_service=PhotoService(storage=storage, public_base_url=public_base_url),
        admin_service=AdminService(
            admin_repository=admin_repository,
            config_flags=resolved_settings.config_flags(),
        ),
        close_resources=close_resources,
    )
