"""Task lifecycle, fan-out planning and ranking."""

from upkeep.modules.tasks import fan_out, ranking, service, state_machine


__all__ = [
    "fan_out",
    "ranking",
    "service",
    "state_machine",
]
