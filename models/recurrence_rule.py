from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Frequency(Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def unit(self) -> str:
        return {"weekly": "week", "monthly": "month", "yearly": "year"}[self.value]

    def unit_label(self, count: int) -> str:
        return self.unit if count == 1 else self.unit + "s"


# preset name -> (frequency, interval)
_PRESETS = {
    "weekly":   (Frequency.WEEKLY, 1),
    "biweekly": (Frequency.WEEKLY, 2),
    "monthly":  (Frequency.MONTHLY, 1),
    "yearly":   (Frequency.YEARLY, 1),
}


@dataclass(frozen=True)
class RecurrenceRule:
    frequency: Frequency
    interval: int = 1
    end_date: Optional[str] = None      # 'YYYY-MM-DD'

    def __post_init__(self):
        if not isinstance(self.frequency, Frequency):
            object.__setattr__(self, "frequency", Frequency(self.frequency))
        object.__setattr__(self, "interval", max(1, int(self.interval or 1)))

    @property
    def preset(self) -> str:
        for name, (freq, interval) in _PRESETS.items():
            if self.frequency is freq and self.interval == interval:
                return name
        return "custom"

    def describe(self) -> str:
        if self.interval == 1:
            text = f"every {self.frequency.unit}"
        else:
            text = f"every {self.interval} {self.frequency.unit_label(self.interval)}"
        if self.end_date:
            text += f" until {self.end_date}"
        return text

    @classmethod
    def from_preset(
        cls,
        preset: str,
        frequency: Frequency | str | None = None,
        interval: int = 1,
        end_date: Optional[str] = None,
    ) -> "RecurrenceRule":
        """Build a rule from a preset name; 'custom' takes frequency/interval as given."""
        if preset in _PRESETS:
            freq, every = _PRESETS[preset]
            return cls(freq, every, end_date)
        if preset != "custom":
            raise ValueError(f"Unknown recurrence preset: {preset}")
        if frequency is None:
            raise ValueError("A custom recurrence needs a frequency.")
        return cls(Frequency(frequency) if isinstance(frequency, str) else frequency, interval, end_date)
