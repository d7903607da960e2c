#!/usr/bin/env python3
"""
Example: Basic Access Network Simulation

This script demonstrates the basic usage of the access network
simulation framework, including:
- Building the site hierarchy with mixed access technologies
- Allocating addresses and computing the layout
- Running the echo traffic model and aggregating flow statistics
- Saving results and plots
"""

import os

from access_network import (
    SimulationConfig,
    Simulator,
    FlowStatsAggregator,
    LinkTier
)
from access_network.core.visualization import (
    plot_network_layout,
    plot_flow_statistics
)
import matplotlib.pyplot as plt


def main():
    print("="*70)
    print("Access Network Simulation - Basic Example")
    print("="*70)

    # =====================================================
    # Step 1: Configure the run
    # =====================================================
    config = SimulationConfig(
        site_count=5,              # One site per access technology
        devices_per_site=50,       # Devices on each site LAN
        simulation_duration=60.0,  # seconds
        enable_trace_capture=True,
        enable_flow_monitoring=True,
        animation_output_path="access-network-animation.json"
    )

    # =====================================================
    # Step 2: Build topology, addresses and layout
    # =====================================================
    print("\n[1] Building network...")
    simulator = Simulator(config)
    topology = simulator.build()

    print("\n[2] Address blocks:")
    for block in simulator.addresses.blocks:
        if block.tier == LinkTier.LOCAL and block.site_index > 1:
            continue
        site = "-" if block.site_index is None else block.site_index
        print(f"  {block.tier.value:<7} site {site}: {block}")
    print(f"  Echo server address: {simulator.addresses.server_address}")

    # =====================================================
    # Step 3: Run and aggregate
    # =====================================================
    print("\n[3] Running simulation...")
    results = simulator.run()

    # =====================================================
    # Step 4: Save results
    # =====================================================
    output_dir = "output"
    print(f"\n[4] Saving results to {output_dir}/ ...")
    simulator.save_results(output_dir)

    fig1 = plot_network_layout(topology, results.positions)
    fig1.savefig(os.path.join(output_dir, "layout.png"), dpi=150)
    print(f"  Saved: {output_dir}/layout.png")

    flows = FlowStatsAggregator(config.simulation_duration).to_dataframe(results.flows)
    fig2 = plot_flow_statistics(flows)
    fig2.savefig(os.path.join(output_dir, "flows.png"), dpi=150)
    print(f"  Saved: {output_dir}/flows.png")

    print("\n" + "="*70)
    print("Simulation Complete!")
    print("="*70)

    plt.close('all')

    return simulator


if __name__ == "__main__":
    main()
