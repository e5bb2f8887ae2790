from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict


@dataclass
class DashboardContext:
    user_email: str
    display_name: str
    today: date
    momentum_threshold: int
    extras: Dict[str, Any] = field(default_factory=dict)

    def get(self, key, default=None):
        if hasattr(self, key):
            return getattr(self, key)
        return self.extras.get(key, default)

    def __getitem__(self, key):
        if hasattr(self, key):
            return getattr(self, key)
        return self.extras[key]
