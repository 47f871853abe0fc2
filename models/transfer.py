from dataclasses import dataclass


@dataclass
class Transfer:
    id: int
    from_account_id: int
    to_account_id: int
    value_from: float
    value_to: float
    date: str               # 'YYYY-MM-DD'
    comment: str = ""
    from_account_name: str = ""
    to_account_name: str = ""
    from_currency: str = ""
    to_currency: str = ""

    @property
    def is_cross_currency(self) -> bool:
        return self.from_currency != self.to_currency
