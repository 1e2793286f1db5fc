"""Supabase repository for per-user documents."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from cutboard.services.sync import UserDataRepository


@dataclass
class SupabaseUserDataRepository(UserDataRepository):
    """Supabase implementation storing one JSON string per user."""

    client: Client
    table_name: str = "user_data"

    def get_user_data(self, user_id: str) -> str | None:
        """Return the stored JSON string for a user."""
        response = (
            self.client.table(self.table_name)
            .select("data")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("data")

    def save_user_data(self, user_id: str, data: str) -> None:
        """Insert or overwrite the user's document."""
        response = (
            self.client.table(self.table_name)
            .upsert(
                {
                    "user_id": user_id,
                    "data": data,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="user_id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save user data")
