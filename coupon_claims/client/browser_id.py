from __future__ import annotations

import json
from pathlib import Path
from uuid import uuid4

BROWSER_ID_KEY = "browser_id"


class BrowserIdStore:
    """
    Locally persisted per-browser identifier.

    The id is an opaque token, not an identity: deleting the state file
    produces a new one and anyone can write any value into it.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return {}
        return data if isinstance(data, dict) else {}

    def get(self) -> str | None:
        value = self._read().get(BROWSER_ID_KEY)
        return value if isinstance(value, str) and value else None

    def get_or_create(self) -> str:
        existing = self.get()
        if existing:
            return existing

        data = self._read()
        data[BROWSER_ID_KEY] = str(uuid4())
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")
        return data[BROWSER_ID_KEY]
