"""
Address Allocation Module

Assigns disjoint IPv4 blocks to every tier of an access network
topology and derives the interface address of each attached node.

Scheme (one counter per tier, keyed by site index):
- Core:   10.0.0.0/30
- Access: 10.1.<site>.0/30
- Local:  192.168.<site>.0/24
"""

import ipaddress
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, Iterable, List, Optional

from .errors import AddressSpaceExhaustedError
from .topology import (
    AccessNetworkTopology,
    LinkTier,
    SERVER_ID,
    CORE_ROUTER_ID,
    site_router_id
)


@dataclass(frozen=True)
class AddressBlock:
    """
    Contiguous address range assigned to one tier/site combination

    Attributes:
        tier: Tier the block belongs to
        site_index: Owning site (None for the core tier)
        network: Covered IPv4 network
    """
    tier: LinkTier
    site_index: Optional[int]
    network: ipaddress.IPv4Network

    @property
    def base_address(self) -> ipaddress.IPv4Address:
        return self.network.network_address

    @property
    def prefix_length(self) -> int:
        return self.network.prefixlen

    @property
    def usable_hosts(self) -> int:
        return max(self.network.num_addresses - 2, 0)

    def overlaps(self, other: "AddressBlock") -> bool:
        return self.network.overlaps(other.network)

    def host(self, index: int) -> ipaddress.IPv4Address:
        """Return the index-th usable host address (0-based)"""
        if not 0 <= index < self.usable_hosts:
            raise AddressSpaceExhaustedError(self.tier, self.site_index)
        return self.network.network_address + 1 + index

    def __str__(self):
        return str(self.network)


@dataclass
class AddressPlan:
    """
    Result of address allocation

    Attributes:
        blocks: Allocated blocks in tier order
        interfaces: Node ID -> interface addresses in link install order
    """
    blocks: List[AddressBlock] = field(default_factory=list)
    interfaces: Dict[str, List[ipaddress.IPv4Address]] = field(default_factory=dict)

    @property
    def server_address(self) -> ipaddress.IPv4Address:
        """Address traffic generators target on the central server"""
        return self.interfaces[SERVER_ID][0]

    def get_blocks(self, tier: LinkTier) -> List[AddressBlock]:
        return [b for b in self.blocks if b.tier == tier]

    def get_block(self, tier: LinkTier, site_index: Optional[int] = None) -> AddressBlock:
        for block in self.blocks:
            if block.tier == tier and block.site_index == site_index:
                return block
        raise KeyError(f"No {tier.value} block for site {site_index}")

    def get_address(self, node_id: str) -> ipaddress.IPv4Address:
        """Primary (first assigned) address of a node"""
        return self.interfaces[node_id][0]

    def to_dict(self) -> Dict:
        return {
            "blocks": [
                {
                    "tier": b.tier.value,
                    "site_index": b.site_index,
                    "network": str(b.network),
                }
                for b in self.blocks
            ],
            "interfaces": {
                node_id: [str(a) for a in addrs]
                for node_id, addrs in self.interfaces.items()
            },
        }


class AddressAllocator:
    """
    Tier-ordered address allocator

    Blocks are generated from fixed per-tier bases so that the same
    topology always yields the same plan. A tier counter that would leave
    its base range raises AddressSpaceExhaustedError instead of wrapping.
    """

    CORE_BASE = ipaddress.IPv4Network("10.0.0.0/16")
    ACCESS_BASE = ipaddress.IPv4Network("10.1.0.0/16")
    LOCAL_BASE = ipaddress.IPv4Network("192.168.0.0/16")

    CORE_PREFIX = 30
    ACCESS_PREFIX = 30
    LOCAL_PREFIX = 24

    # Access blocks are spaced one /24 apart (10.1.<site>.0/30)
    ACCESS_STRIDE_PREFIX = 24

    def allocate(self, topology: AccessNetworkTopology) -> AddressPlan:
        """
        Allocate address blocks for a topology

        Args:
            topology: Built access network topology

        Returns:
            Address plan with blocks and per-node interface addresses

        Raises:
            AddressSpaceExhaustedError: If a tier runs out of blocks
        """
        plan = AddressPlan()

        core = self._block(LinkTier.CORE, None, self.CORE_BASE, self.CORE_PREFIX, self.CORE_PREFIX, 0)
        plan.blocks.append(core)
        self._assign(plan, core, [SERVER_ID, CORE_ROUTER_ID])

        for site_index in range(topology.site_count):
            access = self._block(
                LinkTier.ACCESS, site_index, self.ACCESS_BASE,
                self.ACCESS_STRIDE_PREFIX, self.ACCESS_PREFIX, site_index
            )
            plan.blocks.append(access)
            self._assign(plan, access, [CORE_ROUTER_ID, site_router_id(site_index)])

        for site_index in range(topology.site_count):
            local = self._block(
                LinkTier.LOCAL, site_index, self.LOCAL_BASE,
                self.LOCAL_PREFIX, self.LOCAL_PREFIX, site_index
            )
            members = topology.segments.get(site_index, [site_router_id(site_index)])
            if len(members) > local.usable_hosts:
                raise AddressSpaceExhaustedError(
                    LinkTier.LOCAL, site_index,
                    f"Local block {local} cannot hold {len(members)} addresses "
                    f"for site {site_index}"
                )
            plan.blocks.append(local)
            self._assign(plan, local, members)

        return plan

    @staticmethod
    def _block(
        tier: LinkTier,
        site_index: Optional[int],
        base: ipaddress.IPv4Network,
        stride_prefix: int,
        prefix: int,
        counter: int
    ) -> AddressBlock:
        """Block number ``counter`` of a tier, spaced ``2**(32-stride_prefix)`` apart"""
        capacity = 2 ** (stride_prefix - base.prefixlen)
        if counter >= capacity:
            raise AddressSpaceExhaustedError(tier, site_index)
        stride = 2 ** (32 - stride_prefix)
        start = base.network_address + counter * stride
        return AddressBlock(
            tier=tier,
            site_index=site_index,
            network=ipaddress.IPv4Network(f"{start}/{prefix}")
        )

    @staticmethod
    def _assign(plan: AddressPlan, block: AddressBlock, node_ids: List[str]):
        for i, node_id in enumerate(node_ids):
            plan.interfaces.setdefault(node_id, []).append(block.host(i))


def blocks_are_disjoint(blocks: Iterable[AddressBlock]) -> bool:
    """Check that no two blocks cover a common address"""
    return not any(a.overlaps(b) for a, b in combinations(list(blocks), 2))
