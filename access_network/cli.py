#!/usr/bin/env python3
"""
Command line entry point for access network runs.
"""

import argparse
import sys
from typing import List, Optional

from .core.config import SimulationConfig
from .core.errors import AccessNetworkError
from .core.simulator import Simulator


def build_parser() -> argparse.ArgumentParser:
    defaults = SimulationConfig()
    parser = argparse.ArgumentParser(
        description="Simulate a multi-tier access network and report flow statistics"
    )
    parser.add_argument("--sites", type=int, default=defaults.site_count,
                        help="Number of access sites")
    parser.add_argument("--devices", type=int, default=defaults.devices_per_site,
                        help="Devices per site")
    parser.add_argument("--sim-time", type=float, default=defaults.simulation_duration,
                        help="Simulation duration (s)")
    parser.add_argument("--clients", type=int, default=defaults.clients_per_site,
                        help="Echo clients per site")
    parser.add_argument("--pcap", action=argparse.BooleanOptionalAction,
                        default=defaults.enable_trace_capture,
                        help="Enable trace capture points")
    parser.add_argument("--flowmon", action=argparse.BooleanOptionalAction,
                        default=defaults.enable_flow_monitoring,
                        help="Enable flow statistics")
    parser.add_argument("--anim-file", default=defaults.animation_output_path,
                        help="Layout manifest output file")
    parser.add_argument("--output-dir", default=".",
                        help="Directory for result files")
    parser.add_argument("--plots", action="store_true",
                        help="Save layout and flow plots")
    parser.add_argument("--verbose", action=argparse.BooleanOptionalAction,
                        default=defaults.verbose, help="Verbose output")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = SimulationConfig(
            site_count=args.sites,
            devices_per_site=args.devices,
            simulation_duration=args.sim_time,
            enable_trace_capture=args.pcap,
            enable_flow_monitoring=args.flowmon,
            animation_output_path=args.anim_file,
            clients_per_site=args.clients,
            verbose=args.verbose
        )
        sim = Simulator(config)
        results = sim.run()
        sim.save_results(args.output_dir)
    except AccessNetworkError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.plots:
        from .core.statistics import FlowStatsAggregator
        from .core.visualization import save_all_plots

        flows = None
        if results.report is not None:
            flows = FlowStatsAggregator(config.simulation_duration).to_dataframe(results.flows)
        save_all_plots(sim.topology, flows, output_dir=args.output_dir)

    return 0


if __name__ == "__main__":
    sys.exit(main())
