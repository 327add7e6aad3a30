"""Wallet entities exposed by the payments provider."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True, slots=True)
class WalletSet:
    """Minimal, safe projection of a provider wallet set."""

    id: Optional[str]
    name: Optional[str]
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WalletSet":
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            created_at=data.get("createDate") or data.get("createdAt"),
            updated_at=data.get("updateDate") or data.get("updatedAt"),
        )

    def to_public_dict(self) -> Dict[str, Optional[str]]:
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
