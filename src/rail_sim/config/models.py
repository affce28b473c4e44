from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from rail_sim.domain.mechanics.mechanics_placement import MAX_RADIUS, MIN_RADIUS
from rail_sim.sim.clock import FPS_60


class SimModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    seed: int
    dt: float = FPS_60  # seconds per tick
    duration: float = 60.0  # seconds

    @field_validator("dt")
    @classmethod
    def _positive_dt(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("dt must be > 0")
        return v

    @field_validator("duration")
    @classmethod
    def _nonneg_duration(cls, v: float) -> float:
        if v < 0:
            raise ValueError("duration must be >= 0")
        return v


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False
    sample_every: int = 1


# ----------------- MECHANICS ---------------------


class TrackParamsModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    radius: float = Field(default=6.0, ge=MIN_RADIUS, le=MAX_RADIUS)  # tiles
    allow_bends: bool = False


class QueryModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    cutoff: float = 100.0  # world units
    prefilter_margin: float = 200.0
    iterations: int = Field(default=4, ge=1, le=8)

    @field_validator("cutoff", "prefilter_margin")
    def _nonneg(cls, v: float, info: ValidationInfo) -> float:
        if v < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return v


class MechanicsModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    track: TrackParamsModel = Field(default_factory=TrackParamsModel)
    query: QueryModel = Field(default_factory=QueryModel)


# ----------------- TRAINS ---------------------


class TrainModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    acceleration: float = 200.0  # world units / s^2
    max_speed: float = 300.0  # world units / s

    @field_validator("acceleration", "max_speed")
    def _positive(cls, v: float, info: ValidationInfo) -> float:
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v


class BranchPolicyRandomModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["random"] = "random"
    stream: str = "branching"


class BranchPolicySteeringModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["steering"] = "steering"


BranchPolicyUnion = Annotated[
    BranchPolicyRandomModel | BranchPolicySteeringModel, Field(discriminator="kind")
]


# ----------------- SEEDING ---------------------


class LayoutPathModel(BaseModel):
    """Track laid at startup by repeated placement from ``start`` through each target."""

    model_config = ConfigDict(extra="forbid")
    start: tuple[int, int]
    facing: int = Field(default=0, ge=0, le=7)
    targets: list[tuple[int, int]] = Field(default_factory=list)
    allow_bends: bool | None = None  # None => track.allow_bends


class TrainSeedModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    track: int = Field(ge=0)  # distinct layout tracks, numbered in build order from 0
    sample: float = Field(default=0.0, ge=0.0, le=1.0)
    manual: bool = False


# ------------------------------------------------------------------


class ScenarioModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str
    run_id: str = "local"
    sim: SimModel
    log: LogModel = LogModel()
    mechanics: MechanicsModel = Field(default_factory=MechanicsModel)
    trains: TrainModel = Field(default_factory=TrainModel)
    autonomous: BranchPolicyUnion = Field(default_factory=BranchPolicyRandomModel)
    layout: list[LayoutPathModel] = Field(default_factory=list)
    initial_trains: list[TrainSeedModel] = Field(default_factory=list)

    @model_validator(mode="after")
    def _trains_need_layout(self):
        if self.initial_trains and not self.layout:
            raise ValueError("initial_trains requires a layout to place them on")
        return self
