from dataclasses import dataclass
from typing import Optional


@dataclass
class Budget:
    id: int
    name: str
    value: float            # limit for one period
    period: str             # 'week' | 'month' | 'year'
    category_id: Optional[int] = None   # None = all spending
    account_id: Optional[int] = None    # None = all accounts
    category_name: str = ""
    account_name: str = ""
    color_hex: str = "#888888"
    spent_amount: float = 0.0
    period_start: str = ""
    period_end: str = ""

    @property
    def percentage(self) -> float:
        if self.value <= 0:
            return 0.0
        return self.spent_amount / self.value

    @property
    def remaining(self) -> float:
        return max(0.0, self.value - self.spent_amount)

    @property
    def is_over(self) -> bool:
        return self.spent_amount > self.value
