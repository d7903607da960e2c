"""
Access Network Simulation Framework

Builds multi-tier access networks connecting distributed sites to a
central server over heterogeneous last-mile technologies, and evaluates
their per-flow performance.

Modules:
- core: Topology, addressing, layout, flow statistics and run orchestration
- cli: Command line entry point
"""

from .core import (
    # Errors
    AccessNetworkError,
    InvalidConfigurationError,
    AddressSpaceExhaustedError,
    EmptyFlowDataWarning,
    # Topology
    Node,
    NodeRole,
    Link,
    LinkTier,
    TechnologyProfile,
    AccessNetworkTopology,
    TopologyBuilder,
    build_topology,
    DEFAULT_TECHNOLOGY_TABLE,
    # Addressing
    AddressBlock,
    AddressPlan,
    AddressAllocator,
    blocks_are_disjoint,
    # Layout
    LayoutEngine,
    # Statistics
    FlowRecord,
    AggregateReport,
    FlowStatsAggregator,
    # Traffic
    FlowRecordSource,
    EchoTrafficModel,
    # Simulator
    SimulationConfig,
    Simulator,
    SimulationResults,
    run_basic_simulation
)

__version__ = "0.1.0"

__all__ = [
    'AccessNetworkError',
    'InvalidConfigurationError',
    'AddressSpaceExhaustedError',
    'EmptyFlowDataWarning',
    'Node',
    'NodeRole',
    'Link',
    'LinkTier',
    'TechnologyProfile',
    'AccessNetworkTopology',
    'TopologyBuilder',
    'build_topology',
    'DEFAULT_TECHNOLOGY_TABLE',
    'AddressBlock',
    'AddressPlan',
    'AddressAllocator',
    'blocks_are_disjoint',
    'LayoutEngine',
    'FlowRecord',
    'AggregateReport',
    'FlowStatsAggregator',
    'FlowRecordSource',
    'EchoTrafficModel',
    'SimulationConfig',
    'Simulator',
    'SimulationResults',
    'run_basic_simulation'
]
