from dataclasses import dataclass, field

from models.tag import Tag


@dataclass
class Transaction:
    id: int
    type: str               # 'spending' | 'income'
    value: float
    date: str               # 'YYYY-MM-DD'
    account_id: int
    category_id: int
    comment: str = ""
    account_name: str = ""
    currency: str = ""
    category_name: str = ""
    category_color: str = "#888888"
    tags: list[Tag] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    @property
    def tag_ids(self) -> list[int]:
        return [t.id for t in self.tags]

    @property
    def tag_names(self) -> str:
        return ", ".join(t.name for t in self.tags)

    @property
    def signed_value(self) -> float:
        return self.value if self.type == "income" else -self.value
