from typing import Dict, List
from pydantic import BaseModel, Field
from battle.model import Army, Unit
from battle.preset import generate_preset
from battle.rng import DRNG


class UnitTemplateIn(BaseModel):
    """Unit template schema."""
    name: str
    unit_type: str
    health: int = Field(gt=0)
    base_attack: int = Field(ge=0)
    cost: int = Field(ge=0)
    attack_type: str = ""
    attack_bonuses: Dict[str, float] = Field(default_factory=dict)
    defence_bonuses: Dict[str, float] = Field(default_factory=dict)

    def to_unit(self) -> Unit:
        return Unit(x=0, y=0, **self.model_dump())


class PresetRequest(BaseModel):
    """Preset generation request schema."""
    templates: List[UnitTemplateIn]
    max_points: int = Field(ge=0)
    max_units_per_type: int = Field(default=11, gt=0)
    seed: int = 42

    def generate(self) -> Army:
        """Run the preset generator with this request's templates and seed."""
        return generate_preset([t.to_unit() for t in self.templates], self.max_points,
                               rng=DRNG(self.seed), max_units_per_type=self.max_units_per_type)


class RunnerSettings(BaseModel):
    """Battle runner settings."""
    round_delay_ms: int = Field(default=0, ge=0)
