from dataclasses import dataclass


@dataclass
class BalanceAccount:
    id: int
    name: str
    currency: str           # ISO 4217 code, e.g. 'USD'
    balance: float = 0.0    # initial balance; see AccountService.current_balance
    icon_name: str = "wallet"
    color_hex: str = "#2196F3"
    created_at: str = ""
