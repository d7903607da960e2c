"""
Simulation Configuration Module

Run options consumed before the topology is built.
"""

import math
import numbers
from dataclasses import dataclass, asdict, fields
from typing import Dict

from .errors import InvalidConfigurationError


@dataclass
class SimulationConfig:
    """
    Configuration of an access network run

    Attributes:
        site_count: Number of access sites
        devices_per_site: Devices attached to each site
        simulation_duration: Run duration (s), also the throughput denominator
        enable_trace_capture: Compute link capture points for the tracer
        enable_flow_monitoring: Aggregate flow statistics after the run
        animation_output_path: File the layout manifest is written to
        clients_per_site: Echo clients started on each site
        verbose: Print progress to the console
    """
    site_count: int = 5
    devices_per_site: int = 50
    simulation_duration: float = 60.0
    enable_trace_capture: bool = True
    enable_flow_monitoring: bool = True
    animation_output_path: str = "access-network-animation.json"
    clients_per_site: int = 5
    verbose: bool = True

    def validate(self) -> "SimulationConfig":
        """
        Check option values

        Raises:
            InvalidConfigurationError: On negative or nonsensical values
        """
        for name in ("site_count", "devices_per_site", "clients_per_site"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise InvalidConfigurationError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise InvalidConfigurationError(f"{name} must be >= 0, got {value}")

        duration = self.simulation_duration
        if isinstance(duration, bool) or not isinstance(duration, numbers.Real) \
                or not math.isfinite(duration) or duration <= 0:
            raise InvalidConfigurationError(
                f"simulation_duration must be > 0, got {duration!r}"
            )
        return self

    @classmethod
    def from_dict(cls, data: Dict) -> "SimulationConfig":
        """Build a config from a mapping, rejecting unknown keys"""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidConfigurationError(f"Unknown options: {sorted(unknown)}")
        return cls(**data).validate()

    def to_dict(self) -> Dict:
        return asdict(self)
