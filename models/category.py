from dataclasses import dataclass


@dataclass
class Category:
    id: int
    name: str
    type: str           # 'income' | 'expense'
    icon: str = "circle"
    color_hex: str = "#6B7280"
    sort_index: int = 0
    is_system: bool = False

    @property
    def is_income(self) -> bool:
        return self.type == "income"
