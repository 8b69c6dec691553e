from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Profile:
    id: str
    generations_used: int = 0
    is_pro: bool = False

    @classmethod
    def from_row(cls, user_id: str, row: dict[str, Any]) -> "Profile":
        return cls(
            id=str(row.get("id") or user_id),
            generations_used=int(row.get("generations_used") or 0),
            is_pro=bool(row.get("is_pro")),
        )
