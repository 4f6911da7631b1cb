"""Core utilities, constants and errors for ice rink simulation."""

from icerink.core.config import (
    # Config dataclasses
    PipeConfig,
    RinkGeometryConfig,
    RinkSystemConfig,
    ResurfacerConfig,
    SimulationConfig,
    IceRinkConfig,
    # Config utilities
    load_config,
    save_config,
    config_from_dict,
    get_default_config,
)
from icerink.core.constants import (
    # Heat transfer
    MAX_LAMINAR_REYNOLDS,
    LAMINAR_NUSSELT,
    MAX_EXP_POWER,
    # Water / ice
    LATENT_HEAT_FUSION,
    ICE_SPECIFIC_HEAT,
)
from icerink.core.errors import (
    IceRinkError,
    ConfigurationError,
    NumericalError,
    UnsupportedConcentrationError,
)

__all__ = [
    # Config dataclasses
    "PipeConfig",
    "RinkGeometryConfig",
    "RinkSystemConfig",
    "ResurfacerConfig",
    "SimulationConfig",
    "IceRinkConfig",
    # Config utilities
    "load_config",
    "save_config",
    "config_from_dict",
    "get_default_config",
    # Heat transfer
    "MAX_LAMINAR_REYNOLDS",
    "LAMINAR_NUSSELT",
    "MAX_EXP_POWER",
    # Water / ice
    "LATENT_HEAT_FUSION",
    "ICE_SPECIFIC_HEAT",
    # Errors
    "IceRinkError",
    "ConfigurationError",
    "NumericalError",
    "UnsupportedConcentrationError",
]
