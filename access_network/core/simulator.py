"""
Network Simulator Module

This module provides the run orchestration for an access network:
topology construction, address allocation, layout, handing the network
to a flow record source and aggregating its flow statistics.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .addressing import AddressAllocator, AddressPlan
from .config import SimulationConfig
from .layout import (
    LayoutEngine,
    Position,
    build_animation_manifest,
    save_animation_manifest
)
from .statistics import AggregateReport, FlowRecord, FlowStatsAggregator
from .topology import (
    AccessNetworkTopology,
    TechnologyProfile,
    TopologyBuilder,
    DEFAULT_SITE_NAMES,
    DEFAULT_TECHNOLOGY_TABLE
)
from .traffic import EchoTrafficModel, FlowRecordSource


# Site LANs traced when trace capture is enabled
MAX_CAPTURED_SITES = 2


@dataclass
class SimulationResults:
    """
    Outputs of one run

    Attributes:
        addresses: Allocated address plan
        positions: Node ID -> layout position
        capture_points: Link IDs handed to the trace collaborator
        flows: Per-flow records (empty when monitoring is disabled)
        report: Aggregate report (None when monitoring is disabled)
    """
    addresses: AddressPlan
    positions: Dict[str, Position]
    capture_points: List[str] = field(default_factory=list)
    flows: List[FlowRecord] = field(default_factory=list)
    report: Optional[AggregateReport] = None


class Simulator:
    """
    Access network run orchestrator

    Builds topology, addresses and layout in a single synchronous phase,
    then lets the flow record source run and aggregates its records.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        technology_table: Sequence[TechnologyProfile] = DEFAULT_TECHNOLOGY_TABLE,
        engine: Optional[FlowRecordSource] = None,
        layout_engine: Optional[LayoutEngine] = None,
        site_names: Sequence[str] = DEFAULT_SITE_NAMES
    ):
        """
        Initialize simulator

        Args:
            config: Run configuration (default: SimulationConfig())
            technology_table: Access technology catalog
            engine: Flow record source (default: EchoTrafficModel)
            layout_engine: Layout engine (default: LayoutEngine())
            site_names: Site names used in node descriptions
        """
        self.config = (config or SimulationConfig()).validate()
        self.builder = TopologyBuilder(technology_table)
        self.allocator = AddressAllocator()
        self.layout_engine = layout_engine or LayoutEngine()
        self.site_names = tuple(site_names)
        if engine is None:
            engine = EchoTrafficModel(
                clients_per_site=self.config.clients_per_site,
                progress_bar=self.config.verbose
            )
        self.engine = engine
        self.verbose = self.config.verbose

        self.topology: Optional[AccessNetworkTopology] = None
        self.addresses: Optional[AddressPlan] = None
        self.positions: Dict[str, Position] = {}
        self.results: Optional[SimulationResults] = None

    def build(self) -> AccessNetworkTopology:
        """Build topology, allocate addresses and compute the layout"""
        cfg = self.config
        if self.verbose:
            print("=== Access Network Simulation ===")
            print(f"Sites: {cfg.site_count}")
            print(f"Devices per site: {cfg.devices_per_site}")
            print(f"Duration: {cfg.simulation_duration}s")

        topology = self.builder.build(cfg.site_count, cfg.devices_per_site)
        addresses = self.allocator.allocate(topology)
        positions = self.layout_engine.apply(topology)

        self.topology = topology
        self.addresses = addresses
        self.positions = positions

        if self.verbose:
            print(f"Topology: {topology}")
            for i in range(topology.site_count):
                name = self.site_names[i % len(self.site_names)] if self.site_names else f"Site {i}"
                print(f"  Site {name} - Technology: {topology.get_access_profile(i).label}")
        return topology

    def get_capture_points(self) -> List[str]:
        """Core link plus the LAN segments of the first sites"""
        if self.topology is None:
            return []
        points = [self.topology.get_core_link().id]
        for i in range(min(self.topology.site_count, MAX_CAPTURED_SITES)):
            points.append(f"LAN_{i}")
        return points

    def run(self) -> SimulationResults:
        """
        Run the configured scenario

        Returns:
            Simulation results
        """
        if self.topology is None:
            self.build()
        cfg = self.config

        results = SimulationResults(addresses=self.addresses, positions=self.positions)

        if cfg.enable_trace_capture:
            results.capture_points = self.get_capture_points()

        if self.verbose:
            print("Starting simulation...")
        flows = self.engine.run(self.topology, self.addresses, cfg.simulation_duration)

        if cfg.enable_flow_monitoring:
            aggregator = FlowStatsAggregator(cfg.simulation_duration)
            results.flows = list(flows)
            results.report = aggregator.aggregate(results.flows)

        self.results = results
        if self.verbose:
            self.print_results()
        return results

    def get_results(self) -> Dict:
        """Get results as a plain dictionary"""
        if self.results is None:
            raise RuntimeError("Simulation has not been run")
        return {
            "simulation_config": self.config.to_dict(),
            "network": {
                "num_nodes": self.topology.get_total_nodes(),
                "num_links": self.topology.get_total_links(),
            },
            "addresses": self.addresses.to_dict(),
            "capture_points": list(self.results.capture_points),
            "statistics": self.results.report.to_dict() if self.results.report else None,
        }

    def print_results(self):
        print("\n" + "="*70)
        print("SIMULATION RESULTS")
        print("="*70)
        print(f"  Nodes: {self.topology.get_total_nodes()}")
        print(f"  Links: {self.topology.get_total_links()}")
        print(f"  Address blocks: {len(self.addresses.blocks)}")
        if self.results.capture_points:
            print(f"  Capture points: {', '.join(self.results.capture_points)}")
        if self.results.report is not None:
            self.results.report.print_summary()

    def save_results(self, output_dir: str = ".", prefix: str = "access-network"):
        """
        Write layout manifest and flow statistics

        The manifest goes to ``config.animation_output_path`` (relative
        paths resolved against ``output_dir``); flows go to
        ``<prefix>-flows.csv`` and ``<prefix>-flowmon.json``.
        """
        if self.results is None:
            raise RuntimeError("Simulation has not been run")
        os.makedirs(output_dir, exist_ok=True)

        manifest = build_animation_manifest(self.topology, self.positions, self.site_names)
        anim_path = self.config.animation_output_path
        if not os.path.isabs(anim_path):
            anim_path = os.path.join(output_dir, anim_path)
        save_animation_manifest(manifest, anim_path)

        if self.results.report is not None:
            aggregator = FlowStatsAggregator(self.config.simulation_duration)
            aggregator.to_dataframe(self.results.flows).to_csv(
                os.path.join(output_dir, f"{prefix}-flows.csv"), index=False
            )
            aggregator.save_to_json(
                self.results.flows, os.path.join(output_dir, f"{prefix}-flowmon.json")
            )

        if self.verbose:
            print(f"Animation manifest: {anim_path}")
            print(f"Results saved to {output_dir}/")


def run_basic_simulation(
    site_count: int = 5,
    devices_per_site: int = 50,
    simulation_duration: float = 60.0,
    verbose: bool = False
) -> Dict:
    """
    Convenience function to run a default scenario

    Args:
        site_count: Number of sites
        devices_per_site: Devices per site
        simulation_duration: Duration in seconds
        verbose: Print progress

    Returns:
        Simulation results dictionary
    """
    config = SimulationConfig(
        site_count=site_count,
        devices_per_site=devices_per_site,
        simulation_duration=simulation_duration,
        verbose=verbose
    )
    sim = Simulator(config)
    sim.run()
    return sim.get_results()
