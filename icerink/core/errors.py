"""
Exception hierarchy for ice rink simulation.

Configuration and numerical errors are fatal: they abort the run with a
descriptive message. Operational anomalies (no flow, reverse operation,
already at setpoint) are handled inside the per-step resolution and are
never raised.
"""


class IceRinkError(Exception):
    """Base class for all ice rink simulation errors."""


class ConfigurationError(IceRinkError, ValueError):
    """Invalid or unresolvable system definition."""


class NumericalError(IceRinkError, ArithmeticError):
    """Ill-posed numerical configuration, e.g. a degenerate denominator."""


class UnsupportedConcentrationError(ConfigurationError, NumericalError):
    """Brine concentration with no property table."""

    def __init__(self, fluid: str, concentration: float, supported) -> None:
        self.fluid = fluid
        self.concentration = concentration
        self.supported = tuple(supported)
        super().__init__(
            f"No property table for {fluid} at {concentration}% concentration "
            f"(supported: {', '.join(f'{c:g}' for c in self.supported)})"
        )
