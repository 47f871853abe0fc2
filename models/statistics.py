"""Value objects produced by the statistics and search pipelines."""
from dataclasses import dataclass, field
from datetime import date

from models.category import Category
from models.tag import Tag
from models.transaction import Transaction


@dataclass
class CategorySum:
    """One pie slice: a category and the transactions summed into it."""
    category: Category
    total: float
    transactions: list[Transaction] = field(default_factory=list)


@dataclass
class BarValue:
    type: str       # 'spending' | 'income' | 'profit'
    value: float


@dataclass
class BarGroup:
    start: date
    label: str
    values: list[BarValue] = field(default_factory=list)

    def value_for(self, type_: str) -> float:
        return next((v.value for v in self.values if v.type == type_), 0.0)


@dataclass
class TotalValue:
    type: str       # 'spending' | 'income' | 'profit'
    value: float


@dataclass
class TagTotal:
    tag: Tag
    total: float


@dataclass
class TransactionGroup:
    """Search results for one day."""
    date: str
    transactions: list[Transaction] = field(default_factory=list)

    @property
    def total(self) -> float:
        return sum(t.signed_value for t in self.transactions)
