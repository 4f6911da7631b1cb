"""Control system components for ice rink simulation."""

from icerink.controls.resolvers import (
    ControlDecision,
    FlowProblem,
    FlowResolver,
    OutletTemperatureControl,
    SurfaceTemperatureControl,
    apply_condensation_control,
    apply_reverse_operation_cutoff,
    create_resolver,
)

__all__ = [
    "ControlDecision",
    "FlowProblem",
    "FlowResolver",
    "OutletTemperatureControl",
    "SurfaceTemperatureControl",
    "apply_condensation_control",
    "apply_reverse_operation_cutoff",
    "create_resolver",
]
