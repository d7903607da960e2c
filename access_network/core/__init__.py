"""
Access Network - Core Module

This module contains the core components for access network simulation:
- Topology: Node/link hierarchy and access technology profiles
- Addressing: Disjoint per-tier address blocks
- Layout: Ring-packing visualization coordinates
- Statistics: Flow statistics aggregation
- Traffic: Flow record sources (echo traffic model)
- Simulator: Run orchestration
- Visualization: Plotting tools
"""

from .errors import (
    AccessNetworkError,
    InvalidConfigurationError,
    AddressSpaceExhaustedError,
    EmptyFlowDataWarning
)

from .topology import (
    Node,
    NodeRole,
    Link,
    LinkTier,
    TechnologyProfile,
    AccessNetworkTopology,
    TopologyBuilder,
    build_topology,
    DEFAULT_TECHNOLOGY_TABLE
)

from .addressing import (
    AddressBlock,
    AddressPlan,
    AddressAllocator,
    blocks_are_disjoint
)

from .layout import (
    LayoutEngine,
    build_animation_manifest,
    save_animation_manifest
)

from .statistics import (
    FlowRecord,
    AggregateReport,
    FlowStatsAggregator
)

from .traffic import (
    FlowRecordSource,
    EchoClient,
    EchoTrafficModel
)

from .config import SimulationConfig

from .simulator import Simulator, SimulationResults, run_basic_simulation

from .visualization import (
    plot_network_layout,
    plot_flow_statistics,
    save_all_plots
)

__all__ = [
    # Errors
    'AccessNetworkError',
    'InvalidConfigurationError',
    'AddressSpaceExhaustedError',
    'EmptyFlowDataWarning',
    # Topology
    'Node',
    'NodeRole',
    'Link',
    'LinkTier',
    'TechnologyProfile',
    'AccessNetworkTopology',
    'TopologyBuilder',
    'build_topology',
    'DEFAULT_TECHNOLOGY_TABLE',
    # Addressing
    'AddressBlock',
    'AddressPlan',
    'AddressAllocator',
    'blocks_are_disjoint',
    # Layout
    'LayoutEngine',
    'build_animation_manifest',
    'save_animation_manifest',
    # Statistics
    'FlowRecord',
    'AggregateReport',
    'FlowStatsAggregator',
    # Traffic
    'FlowRecordSource',
    'EchoClient',
    'EchoTrafficModel',
    # Simulator
    'SimulationConfig',
    'Simulator',
    'SimulationResults',
    'run_basic_simulation',
    # Visualization
    'plot_network_layout',
    'plot_flow_statistics',
    'save_all_plots'
]
