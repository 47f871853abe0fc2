from dataclasses import dataclass


@dataclass
class Category:
    id: int
    type: str           # 'spending' | 'income'
    name: str
    icon_name: str = ""
    color_hex: str = "#888888"
    placement: int = 0  # display order within its type, 1-based
