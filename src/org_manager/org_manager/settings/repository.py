from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import Setting


class SettingsRepository(Protocol):
    def get(self, key: str) -> Optional[Setting]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Setting]:
        raise NotImplementedError

    def upsert_many(
        self,
        values: Mapping[str, Any],
        *,
        descriptions: Mapping[str, str],
        updated_by: int,
        updated_at: datetime,
    ) -> int:
        raise NotImplementedError
