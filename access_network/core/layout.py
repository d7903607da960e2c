"""
Layout Module

Computes 2-D visualization coordinates for every node of an access
network and builds the animation manifest written for external viewers.
Positions have no effect on simulation behavior.
"""

import json
import math
import os
from typing import Dict, Optional, Sequence, Tuple

from .errors import InvalidConfigurationError
from .topology import (
    AccessNetworkTopology,
    NodeRole,
    DEFAULT_SITE_NAMES,
    SERVER_ID,
    CORE_ROUTER_ID,
    site_router_id,
    device_id
)

Position = Tuple[float, float]

# RGB colors per role in the animation manifest
ROLE_COLORS: Dict[NodeRole, Tuple[int, int, int]] = {
    NodeRole.CENTRAL_SERVER: (0, 0, 255),
    NodeRole.CORE_ROUTER: (255, 165, 0),
    NodeRole.SITE_ROUTER: (0, 255, 0),
}


class LayoutEngine:
    """
    Deterministic ring-packing layout

    Site routers sit on a circle around the core router; the devices of
    a site are packed on concentric rings around their router, ``ring_capacity``
    devices per ring, each ring ``radius_step`` further out.
    """

    def __init__(
        self,
        anchor: Position = (50.0, 50.0),
        core_offset: Position = (0.0, -20.0),
        site_radius: float = 20.0,
        ring_capacity: int = 20,
        base_radius: float = 5.0,
        radius_step: float = 3.0
    ):
        """
        Initialize layout engine

        Args:
            anchor: Central server position
            core_offset: Core router offset from the server
            site_radius: Radius of the site router circle
            ring_capacity: Devices per ring
            base_radius: Radius of the innermost device ring
            radius_step: Radius increase per ring
        """
        if ring_capacity < 1:
            raise InvalidConfigurationError(f"ring_capacity must be >= 1, got {ring_capacity}")
        self.anchor = anchor
        self.core_offset = core_offset
        self.site_radius = site_radius
        self.ring_capacity = ring_capacity
        self.base_radius = base_radius
        self.radius_step = radius_step

    def server_position(self) -> Position:
        return (float(self.anchor[0]), float(self.anchor[1]))

    def core_position(self) -> Position:
        return (
            float(self.anchor[0] + self.core_offset[0]),
            float(self.anchor[1] + self.core_offset[1])
        )

    def site_position(self, site_index: int, site_count: int) -> Position:
        """Site router position at angle 2*pi*i/site_count around the core router"""
        if site_count < 1:
            raise InvalidConfigurationError(f"site_count must be >= 1 to place a site, got {site_count}")
        cx, cy = self.core_position()
        angle = 2 * math.pi * site_index / site_count
        return (
            cx + self.site_radius * math.cos(angle),
            cy + self.site_radius * math.sin(angle)
        )

    def ring_slot(self, device_index: int) -> Tuple[int, int]:
        """(ring, position in ring) of a device"""
        return divmod(device_index, self.ring_capacity)

    def device_position(
        self,
        site_index: int,
        device_index: int,
        site_count: int
    ) -> Position:
        x, y = self.site_position(site_index, site_count)
        ring, slot = self.ring_slot(device_index)
        radius = self.base_radius + ring * self.radius_step
        angle = 2 * math.pi * slot / self.ring_capacity
        return (
            x + radius * math.cos(angle),
            y + radius * math.sin(angle)
        )

    def compute(self, site_count: int, devices_per_site: int) -> Dict[str, Position]:
        """
        Compute positions for a topology shape

        Args:
            site_count: Number of sites
            devices_per_site: Devices per site

        Returns:
            Mapping of node ID to (x, y)
        """
        positions: Dict[str, Position] = {
            SERVER_ID: self.server_position(),
            CORE_ROUTER_ID: self.core_position(),
        }
        for i in range(site_count):
            positions[site_router_id(i)] = self.site_position(i, site_count)
            for j in range(devices_per_site):
                positions[device_id(i, j)] = self.device_position(i, j, site_count)
        return positions

    def apply(self, topology: AccessNetworkTopology) -> Dict[str, Position]:
        """Compute positions and assign them to the topology's nodes"""
        positions = self.compute(topology.site_count, topology.devices_per_site)
        for node_id, (x, y) in positions.items():
            topology.nodes[node_id].set_position(x, y)
        return positions


def describe_nodes(
    topology: AccessNetworkTopology,
    site_names: Sequence[str] = DEFAULT_SITE_NAMES
) -> Dict[str, str]:
    """Human readable descriptions for the server, core router and site routers"""
    descriptions = {
        SERVER_ID: "Cloud Server",
        CORE_ROUTER_ID: "WAN Router",
    }
    for i in range(topology.site_count):
        name = site_names[i % len(site_names)] if site_names else f"Site {i}"
        label = topology.get_access_profile(i).label
        descriptions[site_router_id(i)] = f"{name} ({label})"
    return descriptions


def build_animation_manifest(
    topology: AccessNetworkTopology,
    positions: Dict[str, Position],
    site_names: Sequence[str] = DEFAULT_SITE_NAMES
) -> Dict:
    """Collect positions, descriptions and colors of every node"""
    descriptions = describe_nodes(topology, site_names)
    nodes = []
    for node_id, node in topology.nodes.items():
        x, y = positions[node_id]
        entry = {
            "id": node_id,
            "role": node.role.value,
            "x": x,
            "y": y,
        }
        if node_id in descriptions:
            entry["description"] = descriptions[node_id]
        color: Optional[Tuple[int, int, int]] = ROLE_COLORS.get(node.role)
        if color is not None:
            entry["color"] = list(color)
        nodes.append(entry)

    links = [
        {"id": link.id, "source": link.source, "target": link.target, "tier": link.tier.value}
        for link in topology.links.values()
    ]
    return {"nodes": nodes, "links": links}


def save_animation_manifest(manifest: Dict, filepath: str):
    """Write the animation manifest as JSON"""
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(filepath, 'w') as f:
        json.dump(manifest, f, indent=2)
