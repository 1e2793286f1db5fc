"""Supabase admin data access."""

from dataclasses import dataclass

from supabase import Client

from cutboard.services.admin import AdminRepository


@dataclass
class SupabaseAdminRepository(AdminRepository):
    """Supabase implementation for admin queries."""

    client: Client
    table_name: str = "user_data"

    def count_user_documents(self) -> int:
        """Return the number of stored documents."""
        response = (
            self.client.table(self.table_name)
            .select("user_id", count="exact")
            .limit(1)
            .execute()
        )
        return response.count or 0

    def list_user_documents(self, limit: int) -> list[dict[str, object]]:
        """Return users ordered by last document update."""
        response = (
            self.client.table(self.table_name)
            .select("user_id, updated_at")
            .order("updated_at", desc=True)
            .limit(limit)
            .execute()
        )
        return response.data or []
