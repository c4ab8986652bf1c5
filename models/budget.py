from dataclasses import dataclass
from typing import Optional


@dataclass
class Budget:
    id: int
    month: str          # 'YYYY-MM'
    amount: float
    category_id: Optional[int] = None   # None = overall monthly budget
    category_name: str = ""
    sync_with_income: bool = False
    spent_amount: float = 0.0
    color_hex: str = "#6B7280"

    @property
    def is_overall(self) -> bool:
        return self.category_id is None

    @property
    def percentage(self) -> float:
        if self.amount <= 0:
            return 0.0
        return self.spent_amount / self.amount

    @property
    def remaining(self) -> float:
        return self.amount - self.spent_amount
