from dataclasses import dataclass
from typing import Optional

from models.recurrence_rule import RecurrenceRule


@dataclass
class Transaction:
    id: Optional[int]
    amount: float           # negative = expense, positive = income
    date: str               # 'YYYY-MM-DD'
    note: str = ""
    category_id: Optional[int] = None
    category_name: str = ""
    is_recurring: bool = False
    recurrence: Optional[RecurrenceRule] = None
    series_id: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def is_expense(self) -> bool:
        return self.amount < 0
