"""Pydantic schemas for run results, service requests and engine config."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core_physics.screen import ScreenConfig
from ..sandbox.context import SandboxLimits
from ..sandbox.results import OutputEvent, PathResult


class Mode(str, Enum):
    INTERFERENCE = "interference"
    COLLAPSE = "collapse"


class RunResult(BaseModel):
    """Sole artifact of a run; immutable once produced."""
    model_config = ConfigDict(frozen=True)

    seed: int
    mode: Mode
    paths: List[PathResult] = Field(default_factory=list)
    chosen_path: Optional[int] = None
    screen_position: float = 0.0

    @model_validator(mode='after')
    def _check_choice(self):
        if self.mode is Mode.COLLAPSE:
            if self.chosen_path is None:
                raise ValueError("collapse result requires chosen_path")
            if not 0 <= self.chosen_path < len(self.paths):
                raise ValueError(f"chosen_path {self.chosen_path} out of range for {len(self.paths)} paths")
        elif self.chosen_path is not None:
            raise ValueError("interference result must not carry chosen_path")
        return self

    @property
    def n_paths(self) -> int:
        return len(self.paths)

    def which_value(self) -> float:
        """Simple readout: mean return value in superposition, chosen value otherwise."""
        if not self.paths:
            return 0.0
        if self.mode is Mode.COLLAPSE:
            return self.paths[self.chosen_path].return_value
        return sum(p.return_value for p in self.paths) / len(self.paths)

    def observed_trace(self) -> List[OutputEvent]:
        """Trace a caller should replay: the chosen path's, else path 0's."""
        if not self.paths:
            return []
        index = self.chosen_path if self.mode is Mode.COLLAPSE else 0
        return list(self.paths[index].trace)

    @classmethod
    def empty(cls, seed: int) -> "RunResult":
        """No paths were offered."""
        return cls(seed=seed, mode=Mode.INTERFERENCE)

    @classmethod
    def fallback(cls, seed: int, n_paths: int = 2) -> "RunResult":
        """Fixed-shape result used when the host could not run the script."""
        return cls(
            seed=seed,
            mode=Mode.INTERFERENCE,
            paths=[PathResult.empty(i) for i in range(n_paths)],
        )


class RunRequest(BaseModel):
    """Request schema for a single run."""
    script: str
    seed: Optional[int] = None


class BatchRequest(BaseModel):
    """Request schema for repeated runs over consecutive seeds."""
    script: str
    count: int = Field(gt=0)
    base_seed: Optional[int] = None
    batch_size: Optional[int] = Field(default=None, gt=0)


class EngineConfig(BaseModel):
    """Engine configuration, usually loaded from YAML."""
    screen: ScreenConfig = Field(default_factory=ScreenConfig)
    sandbox: SandboxLimits = Field(default_factory=SandboxLimits)
    sample_seed_offset: int = 1000
    max_workers: int = Field(default=4, gt=0)
    batch_size: int = Field(default=50, gt=0)
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, cfg: Optional[Dict[str, Any]]) -> "EngineConfig":
        known = {k: v for k, v in (cfg or {}).items() if k in cls.model_fields}
        return cls(**known)
