"""
Access Network Topology Module

This module provides classes for modeling a three-tier access network:
a central server behind a core router, access sites reached over
heterogeneous last-mile technologies, and the devices of each site
sharing a local broadcast segment.
"""

import networkx as nx
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
from enum import Enum
import numbers

from .errors import InvalidConfigurationError


class NodeRole(Enum):
    """Role of a network node"""
    CENTRAL_SERVER = "central_server"
    CORE_ROUTER = "core_router"
    SITE_ROUTER = "site_router"
    DEVICE = "device"


class LinkTier(Enum):
    """Tier of a network link"""
    CORE = "core"         # Central server <-> core router
    ACCESS = "access"     # Core router <-> site router
    LOCAL = "local"       # Site router <-> devices (shared segment)


@dataclass(frozen=True)
class TechnologyProfile:
    """
    Link technology profile

    Attributes:
        bandwidth: Link bandwidth (Mbps)
        propagation_delay: One-way propagation delay (ms)
        label: Human readable technology name
    """
    bandwidth: float
    propagation_delay: float
    label: str


# Access technologies, indexed by site index modulo table size
DEFAULT_TECHNOLOGY_TABLE: Tuple[TechnologyProfile, ...] = (
    TechnologyProfile(bandwidth=1000.0, propagation_delay=5.0, label="Fibre Optique"),
    TechnologyProfile(bandwidth=100.0, propagation_delay=20.0, label="4G/5G"),
    TechnologyProfile(bandwidth=50.0, propagation_delay=600.0, label="Satellite"),
    TechnologyProfile(bandwidth=200.0, propagation_delay=10.0, label="Liaison Radio"),
    TechnologyProfile(bandwidth=20.0, propagation_delay=30.0, label="ADSL"),
)

CORE_PROFILE = TechnologyProfile(bandwidth=10000.0, propagation_delay=2.0, label="Core backbone")
LAN_PROFILE = TechnologyProfile(bandwidth=100.0, propagation_delay=0.00656, label="CSMA LAN")

DEFAULT_SITE_NAMES: Tuple[str, ...] = (
    "Nkolbisson", "Mvog-Ada", "Essos", "Mendong", "Ngoa-Ekelle"
)

SERVER_ID = "SERVER"
CORE_ROUTER_ID = "CORE"


def site_router_id(site_index: int) -> str:
    return f"SITE_{site_index}"


def device_id(site_index: int, device_index: int) -> str:
    return f"DEV_{site_index}_{device_index}"


@dataclass(frozen=True, eq=False)
class Node:
    """
    Represents a network node

    Identity fields are read-only; only the position may be assigned, once.

    Attributes:
        id: Unique identifier
        role: Role of the node in the hierarchy
        site_index: Owning site (site routers and devices only)
        device_index: Index within the site (devices only)
        position: (x, y) visualization coordinates, set once by the layout
    """
    id: str
    role: NodeRole
    site_index: Optional[int] = None
    device_index: Optional[int] = None
    position: Optional[Tuple[float, float]] = field(default=None)

    def set_position(self, x: float, y: float):
        """Assign visualization coordinates"""
        if self.position is not None:
            raise ValueError(f"Position of node {self.id} is already set")
        object.__setattr__(self, "position", (float(x), float(y)))


@dataclass(frozen=True)
class Link:
    """
    Represents a network link

    Attributes:
        id: Unique identifier
        source: Source node ID
        target: Target node ID
        profile: Technology profile of the link
        tier: Tier the link belongs to
        site_index: Owning site (access and local tiers)
        segment_id: Shared broadcast segment (local tier only)
    """
    id: str
    source: str
    target: str
    profile: TechnologyProfile
    tier: LinkTier
    site_index: Optional[int] = None
    segment_id: Optional[str] = None

    @property
    def bandwidth(self) -> float:
        return self.profile.bandwidth

    @property
    def propagation_delay(self) -> float:
        return self.profile.propagation_delay


def _check_count(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidConfigurationError(f"{name} must be >= 0, got {value}")
    return int(value)


class AccessNetworkTopology:
    """
    Built access network

    Holds the nodes, links and shared LAN segments of one topology
    together with a NetworkX graph used for path computation.
    """

    def __init__(
        self,
        site_count: int,
        devices_per_site: int,
        technology_table: Sequence[TechnologyProfile]
    ):
        self.site_count = site_count
        self.devices_per_site = devices_per_site
        self.technology_table: Tuple[TechnologyProfile, ...] = tuple(technology_table)

        self.nodes: Dict[str, Node] = {}
        self.links: Dict[str, Link] = {}
        # site index -> member node IDs, site router first
        self.segments: Dict[int, List[str]] = {}

        self.graph: nx.Graph = nx.Graph()

    @property
    def server(self) -> Node:
        return self.nodes[SERVER_ID]

    @property
    def core_router(self) -> Node:
        return self.nodes[CORE_ROUTER_ID]

    def get_site_router(self, site_index: int) -> Node:
        return self.nodes[site_router_id(site_index)]

    def get_device(self, site_index: int, device_index: int) -> Node:
        return self.nodes[device_id(site_index, device_index)]

    def get_site_devices(self, site_index: int) -> List[Node]:
        return [
            self.nodes[device_id(site_index, j)]
            for j in range(self.devices_per_site)
        ]

    def get_nodes_by_role(self, role: NodeRole) -> List[Node]:
        return [node for node in self.nodes.values() if node.role == role]

    def get_links_by_tier(self, tier: LinkTier) -> List[Link]:
        return [link for link in self.links.values() if link.tier == tier]

    def get_core_link(self) -> Link:
        return self.get_links_by_tier(LinkTier.CORE)[0]

    def get_access_link(self, site_index: int) -> Link:
        return self.links[f"ACCESS_{site_index}"]

    def get_access_profile(self, site_index: int) -> TechnologyProfile:
        return self.get_access_link(site_index).profile

    def get_link(self, src: str, dst: str) -> Optional[Link]:
        """Get link between two nodes (either direction)"""
        if not self.graph.has_edge(src, dst):
            return None
        return self.links[self.graph.edges[src, dst]["link_id"]]

    def get_path(self, src: str, dst: str) -> List[str]:
        """Minimum-delay node path between two nodes"""
        return nx.shortest_path(self.graph, src, dst, weight="weight")

    def get_path_links(self, src: str, dst: str) -> List[Link]:
        path = self.get_path(src, dst)
        return [self.get_link(a, b) for a, b in zip(path[:-1], path[1:])]

    def get_total_nodes(self) -> int:
        return len(self.nodes)

    def get_total_links(self) -> int:
        return len(self.links)

    def _add_node(self, node: Node):
        self.nodes[node.id] = node
        self.graph.add_node(
            node.id,
            role=node.role,
            site_index=node.site_index
        )

    def _add_link(self, link: Link):
        self.links[link.id] = link
        self.graph.add_edge(
            link.source,
            link.target,
            link_id=link.id,
            weight=link.propagation_delay,
            bandwidth=link.bandwidth,
            tier=link.tier
        )

    def __repr__(self):
        return (f"AccessNetworkTopology(sites={self.site_count}, "
                f"devices_per_site={self.devices_per_site}, "
                f"total_nodes={len(self.nodes)}, "
                f"total_links={len(self.links)})")


class TopologyBuilder:
    """
    Access network topology builder

    Builds the hierarchy leaf-first: devices, site routers, the core
    router and finally the central server. Access link technology is a
    pure function of the site index: ``table[site_index % len(table)]``.
    """

    def __init__(
        self,
        technology_table: Sequence[TechnologyProfile] = DEFAULT_TECHNOLOGY_TABLE,
        core_profile: TechnologyProfile = CORE_PROFILE,
        lan_profile: TechnologyProfile = LAN_PROFILE
    ):
        """
        Initialize topology builder

        Args:
            technology_table: Ordered catalog of access technologies
            core_profile: Profile of the server <-> core router link
            lan_profile: Profile of each site's shared LAN segment
        """
        self.technology_table: Tuple[TechnologyProfile, ...] = tuple(technology_table)
        if not self.technology_table:
            raise InvalidConfigurationError("Technology table must not be empty")
        self.core_profile = core_profile
        self.lan_profile = lan_profile

    def profile_for_site(self, site_index: int) -> TechnologyProfile:
        """Access technology profile for a site"""
        _check_count("site_index", site_index)
        return self.technology_table[site_index % len(self.technology_table)]

    def build(self, site_count: int, devices_per_site: int) -> AccessNetworkTopology:
        """
        Build the topology

        Args:
            site_count: Number of access sites
            devices_per_site: Devices attached to each site

        Returns:
            Built topology

        Raises:
            InvalidConfigurationError: If a count is negative
        """
        _check_count("site_count", site_count)
        _check_count("devices_per_site", devices_per_site)

        topology = AccessNetworkTopology(site_count, devices_per_site, self.technology_table)

        self._create_devices(topology)
        self._create_site_routers(topology)
        self._create_core(topology)
        return topology

    def _create_devices(self, topology: AccessNetworkTopology):
        for site_index in range(topology.site_count):
            for device_index in range(topology.devices_per_site):
                topology._add_node(Node(
                    id=device_id(site_index, device_index),
                    role=NodeRole.DEVICE,
                    site_index=site_index,
                    device_index=device_index
                ))

    def _create_site_routers(self, topology: AccessNetworkTopology):
        """Create site routers and attach each site's shared LAN segment"""
        for site_index in range(topology.site_count):
            router = Node(
                id=site_router_id(site_index),
                role=NodeRole.SITE_ROUTER,
                site_index=site_index
            )
            topology._add_node(router)

            segment_id = f"LAN_{site_index}"
            members = [router.id]
            for device_index in range(topology.devices_per_site):
                dev_id = device_id(site_index, device_index)
                topology._add_link(Link(
                    id=f"LAN_{site_index}_{device_index}",
                    source=router.id,
                    target=dev_id,
                    profile=self.lan_profile,
                    tier=LinkTier.LOCAL,
                    site_index=site_index,
                    segment_id=segment_id
                ))
                members.append(dev_id)
            topology.segments[site_index] = members

    def _create_core(self, topology: AccessNetworkTopology):
        """Create core router, central server and the core/access links"""
        topology._add_node(Node(id=CORE_ROUTER_ID, role=NodeRole.CORE_ROUTER))

        for site_index in range(topology.site_count):
            topology._add_link(Link(
                id=f"ACCESS_{site_index}",
                source=CORE_ROUTER_ID,
                target=site_router_id(site_index),
                profile=self.profile_for_site(site_index),
                tier=LinkTier.ACCESS,
                site_index=site_index
            ))

        topology._add_node(Node(id=SERVER_ID, role=NodeRole.CENTRAL_SERVER))
        topology._add_link(Link(
            id="CORE_0",
            source=SERVER_ID,
            target=CORE_ROUTER_ID,
            profile=self.core_profile,
            tier=LinkTier.CORE
        ))


def build_topology(
    site_count: int,
    devices_per_site: int,
    technology_table: Sequence[TechnologyProfile] = DEFAULT_TECHNOLOGY_TABLE
) -> AccessNetworkTopology:
    """Convenience wrapper around TopologyBuilder"""
    return TopologyBuilder(technology_table).build(site_count, devices_per_site)
