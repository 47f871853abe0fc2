from dataclasses import dataclass


@dataclass
class Tag:
    id: int
    name: str
    color_hex: str = "#888888"
