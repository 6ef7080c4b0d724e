"""World generation configuration models and TOML loading."""

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, model_validator


class NoiseLayer(BaseModel, frozen=True):
    """One octave of an octave stack."""

    frequency: float = Field(description="Sample frequency (coordinate scale)")
    amplitude: float = Field(description="Weight of this octave in the sum")


def _layers(frequencies: list[float], amplitudes: list[float]) -> list[NoiseLayer]:
    return [
        NoiseLayer(frequency=f, amplitude=a) for f, a in zip(frequencies, amplitudes)
    ]


class FieldConfig(BaseModel):
    """Octave stack for a single scalar field."""

    layers: list[NoiseLayer] = Field(description="Octave stack, summed in order")
    seed_offset: int = Field(default=0, description="Added to the world seed")


class ClassificationConfig(BaseModel):
    """Biome color classification parameters."""

    blend_strength: float = Field(
        default=10.0, description="Multiplier applied to blend factors before clamping"
    )
    transition_range: float = Field(
        default=0.05, description="Half-width of the grass transition windows"
    )
    moisture_tint: bool = Field(
        default=False, description="Tint the plain forest band by moisture"
    )


class SettlementConfig(BaseModel):
    """Settlement placement parameters.

    The candidate count is drawn from [count_min, count_max). Equal bounds
    give a fixed count; an inverted range is rejected.
    """

    count_min: int = Field(default=15, ge=0, description="Minimum candidate draws")
    count_max: int = Field(
        default=25, ge=0, description="Exclusive upper bound on candidate draws"
    )
    min_height: float = Field(default=0.35, description="Lowest habitable height")
    max_height: float = Field(
        default=0.6, description="Habitable heights are strictly below this"
    )
    radius: int = Field(default=1, ge=0, description="Footprint radius (1 = 3x3)")
    color: tuple[int, int, int] = Field(
        default=(180, 100, 50), description="Footprint color"
    )

    @model_validator(mode="after")
    def check_count_range(self) -> "SettlementConfig":
        if self.count_max < self.count_min:
            raise ValueError(
                f"count_max ({self.count_max}) is below count_min ({self.count_min})"
            )
        return self


class RevealConfig(BaseModel):
    """Incremental reveal parameters."""

    batch_size: int = Field(
        default=200, gt=0, description="Visited cells between progress events"
    )
    pause_ms: int = Field(
        default=30, ge=0, description="Pause at each batch boundary"
    )


class WorldGenConfig(BaseModel):
    """Complete world generation configuration."""

    seed: int = Field(default=42, description="Random seed for reproducibility")
    width: int = Field(default=400, gt=0, description="World width in cells")
    height: int = Field(default=300, gt=0, description="World height in cells")

    elevation: FieldConfig = Field(
        default_factory=lambda: FieldConfig(
            layers=_layers([0.005, 0.01, 0.02, 0.04], [0.6, 0.3, 0.2, 0.1]),
        )
    )
    moisture: FieldConfig = Field(
        default_factory=lambda: FieldConfig(
            layers=_layers([0.02, 0.04, 0.08], [0.5, 0.3, 0.2]),
            seed_offset=300,
        )
    )
    temperature: FieldConfig = Field(
        default_factory=lambda: FieldConfig(
            layers=_layers([0.01, 0.02, 0.05], [0.5, 0.3, 0.2]),
            seed_offset=700,
        )
    )
    classification: ClassificationConfig = Field(default_factory=ClassificationConfig)
    settlements: SettlementConfig = Field(default_factory=SettlementConfig)
    reveal: RevealConfig = Field(default_factory=RevealConfig)


def load_config(config_path: Path) -> WorldGenConfig:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the TOML config file.

    Returns:
        Parsed WorldGenConfig.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If TOML is malformed.
        pydantic.ValidationError: If values are out of range.
    """
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return WorldGenConfig.model_validate(data)
