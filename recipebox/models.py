from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class Recipe:
    """Domain object representing a stored recipe."""

    id: str
    title: str
    ingredients: List[str] = field(default_factory=list)
    instructions: str = ""
    author: str = ""
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "ingredients": list(self.ingredients),
            "instructions": self.instructions,
            "author": self.author,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recipe":
        created_at = data.get("createdAt")
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            ingredients=list(data.get("ingredients") or []),
            instructions=data.get("instructions", ""),
            author=data.get("author", ""),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )


__all__ = ["Recipe"]
