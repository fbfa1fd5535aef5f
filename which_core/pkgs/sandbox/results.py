"""Immutable records produced by script passes."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class OutputEvent(BaseModel):
    """One recorded output call: stringified arguments plus simulated delay."""
    model_config = ConfigDict(frozen=True)

    args: List[str] = Field(default_factory=list)
    delay: float = Field(default=0.0, ge=0.0)

    def text(self) -> str:
        return " ".join(self.args)


class PathResult(BaseModel):
    """Outcome of executing one path in its own context."""
    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    return_value: float = 0.0
    trace: List[OutputEvent] = Field(default_factory=list)

    @classmethod
    def empty(cls, index: int) -> "PathResult":
        return cls(index=index)
