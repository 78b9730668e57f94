from dataclasses import dataclass


def units_for_pages(page_count: int) -> int:
    """One unit per extracted frame, one for assembly, one for composition."""
    return max(page_count, 0) + 2


@dataclass
class ProgressCounter:
    completed_units: int = 0
    total_units: int = 0

    def reset(self, total_units: int) -> None:
        self.completed_units = 0
        self.total_units = max(total_units, 0)

    def advance(self, units: int = 1) -> None:
        self.completed_units = min(self.completed_units + units, self.total_units)

    def complete(self) -> None:
        self.completed_units = self.total_units

    @property
    def percentage(self) -> int:
        """Overall completion as an integer 0-100."""
        if self.total_units <= 0:
            return 0
        return int((self.completed_units / self.total_units) * 100)

    def __str__(self) -> str:
        return f"{self.completed_units}/{self.total_units} ({self.percentage}%)"
