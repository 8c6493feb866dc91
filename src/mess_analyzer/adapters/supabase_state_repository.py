"""Supabase repository for key-value application state."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from mess_analyzer.services.history import StateRepository


@dataclass
class SupabaseStateRepository(StateRepository):
    """Supabase implementation storing each key as a JSON row."""

    client: Client
    table_name: str = "app_state"

    def load(self, key: str) -> object | None:
        """Return the stored value for a key."""
        response = (
            self.client.table(self.table_name)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("value")

    def save_many(self, values: dict[str, object]) -> None:
        """Upsert every key in one request."""
        if not values:
            return
        updated_at = datetime.now(tz=UTC).isoformat()
        payload = [
            {"key": key, "value": value, "updated_at": updated_at}
            for key, value in values.items()
        ]
        self.client.table(self.table_name).upsert(payload, on_conflict="key").execute()
