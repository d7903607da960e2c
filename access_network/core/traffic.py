"""
Traffic Module

Flow record sources feed the statistics aggregator with the per-flow
counters of a completed run. ``EchoTrafficModel`` is a reference source:
UDP-echo style clients on site devices exchanging fixed-size requests
with the central server, evaluated analytically from link profiles.
"""

import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional
from tqdm import tqdm

from .addressing import AddressPlan
from .statistics import FlowRecord
from .topology import AccessNetworkTopology, Link, SERVER_ID, device_id


# IPv4 + UDP header bytes carried by every packet
IP_UDP_HEADER_BYTES = 28
FIRST_EPHEMERAL_PORT = 49153


class FlowRecordSource(ABC):
    """Engine interface: produce final per-flow counters for a run"""

    @abstractmethod
    def run(
        self,
        topology: AccessNetworkTopology,
        addresses: AddressPlan,
        duration: float
    ) -> List[FlowRecord]:
        """
        Run traffic over the topology

        Args:
            topology: Built topology
            addresses: Address plan of the topology
            duration: Run duration in seconds

        Returns:
            Final per-flow records
        """
        pass


@dataclass(frozen=True)
class EchoClient:
    """
    One echo client application

    Attributes:
        site_index: Site of the hosting device
        client_index: Client number within the site
        node_id: Hosting device ID
        start_time: First request time (s)
        interval: Time between requests (s)
        max_packets: Maximum requests sent
        packet_size: Payload size (bytes)
        source_port: Client UDP port
    """
    site_index: int
    client_index: int
    node_id: str
    start_time: float
    interval: float
    max_packets: int
    packet_size: int
    source_port: int

    def get_send_times(self, stop_time: float) -> np.ndarray:
        times = self.start_time + np.arange(self.max_packets) * self.interval
        return times[times < stop_time]


class EchoTrafficModel(FlowRecordSource):
    """
    Analytic echo traffic model

    Every site runs ``clients_per_site`` clients, client j on device
    ``j mod devices_per_site``. Site i sends every ``1.0 + 0.1*i`` seconds,
    client j of site i starts at ``2.0 + 0.5*i + 0.1*j``. One-way delay is
    the sum of propagation and serialization delays along the path; the
    network is assumed uncongested, so only packets still in flight at the
    end of the run are lost. Like a flow monitor, no record is produced for
    a flow that never transmitted a packet.
    """

    def __init__(
        self,
        clients_per_site: int = 5,
        max_packets: int = 100,
        packet_size: int = 1024,
        server_port: int = 9,
        server_start: float = 1.0,
        progress_bar: bool = False
    ):
        self.clients_per_site = clients_per_site
        self.max_packets = max_packets
        self.packet_size = packet_size
        self.server_port = server_port
        self.server_start = server_start
        self.progress_bar = progress_bar

    def get_clients(self, topology: AccessNetworkTopology) -> List[EchoClient]:
        """Client applications in site, then client order"""
        clients = []
        if topology.devices_per_site == 0:
            return clients
        port = FIRST_EPHEMERAL_PORT
        for i in range(topology.site_count):
            for j in range(self.clients_per_site):
                clients.append(EchoClient(
                    site_index=i,
                    client_index=j,
                    node_id=device_id(i, j % topology.devices_per_site),
                    start_time=2.0 + i * 0.5 + j * 0.1,
                    interval=1.0 + i * 0.1,
                    max_packets=self.max_packets,
                    packet_size=self.packet_size,
                    source_port=port
                ))
                port += 1
        return clients

    def get_one_way_delay(self, links: List[Link]) -> float:
        """Propagation plus serialization delay over a path (s)"""
        bits = (self.packet_size + IP_UDP_HEADER_BYTES) * 8
        return sum(
            link.propagation_delay / 1000.0 + bits / (link.bandwidth * 1e6)
            for link in links
        )

    def run(
        self,
        topology: AccessNetworkTopology,
        addresses: AddressPlan,
        duration: float
    ) -> List[FlowRecord]:
        records: List[FlowRecord] = []
        wire_size = self.packet_size + IP_UDP_HEADER_BYTES
        server_address = str(addresses.server_address)

        clients = self.get_clients(topology)
        iterator = clients
        if self.progress_bar:
            iterator = tqdm(clients, desc="Evaluating flows", unit="client")

        delay_cache = {}
        for client in iterator:
            if client.node_id not in delay_cache:
                path = topology.get_path_links(client.node_id, SERVER_ID)
                delay_cache[client.node_id] = self.get_one_way_delay(path)
            delay = delay_cache[client.node_id]

            sent = client.get_send_times(duration)
            # Flows exist only once a packet is seen
            if len(sent) == 0:
                continue
            arrived_at_server = sent + delay
            delivered = (arrived_at_server < duration) & (arrived_at_server >= self.server_start)
            upstream_rx = int(np.count_nonzero(delivered))
            # Echo replies leave the server as soon as requests arrive
            echoed = sent[delivered]
            downstream_rx = int(np.count_nonzero(echoed + 2 * delay < duration))

            client_address = str(addresses.get_address(client.node_id))
            records.append(self._record(
                len(records) + 1, len(sent), upstream_rx, wire_size, delay,
                client_address, client.source_port, server_address, self.server_port
            ))
            if upstream_rx == 0:
                continue
            records.append(self._record(
                len(records) + 1, upstream_rx, downstream_rx, wire_size, delay,
                server_address, self.server_port, client_address, client.source_port
            ))
        return records

    @staticmethod
    def _record(
        flow_id: int,
        tx: int,
        rx: int,
        wire_size: int,
        delay: float,
        source: str,
        source_port: int,
        destination: str,
        destination_port: Optional[int]
    ) -> FlowRecord:
        return FlowRecord(
            flow_id=flow_id,
            tx_packets=tx,
            rx_packets=rx,
            rx_bytes=rx * wire_size,
            delay_sum=rx * delay,
            tx_bytes=tx * wire_size,
            source=source,
            destination=destination,
            source_port=source_port,
            destination_port=destination_port
        )
