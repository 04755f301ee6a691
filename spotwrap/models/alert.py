"""User-visible failure notification."""
from dataclasses import dataclass


@dataclass(frozen=True)
class Alert:
    title: str
    message: str = ""

    def to_dict(self) -> dict:
        return {"title": self.title, "message": self.message}
