"""Local JSON file storage for the single-profile state."""

import json
from dataclasses import dataclass
from pathlib import Path

from mess_analyzer.services.history import StateReadError, StateRepository


@dataclass
class JsonFileStateRepository(StateRepository):
    """Keeps every state key in one JSON document on disk."""

    path: Path

    def load(self, key: str) -> object | None:
        """Return the value stored under a key."""
        return self._read().get(key)

    def save_many(self, values: dict[str, object]) -> None:
        """Merge values into the document and replace the file atomically."""
        document = self._read()
        document.update(values)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_text(
            json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8"
        )
        tmp_path.replace(self.path)

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as exc:
            raise StateReadError(f"State file {self.path} is not valid JSON") from exc
        if not isinstance(raw, dict):
            raise StateReadError(f"State file {self.path} does not hold a JSON object")
        return raw
