"""
Flow Statistics Module

This module aggregates the per-flow counters reported by a simulation
engine at the end of a run into throughput, delivery ratio and delay
metrics.
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Optional
import json
import numbers
import warnings

from .errors import InvalidConfigurationError, EmptyFlowDataWarning


@dataclass(frozen=True)
class FlowRecord:
    """
    Accumulated counters of one end-to-end flow

    Attributes:
        flow_id: Opaque flow identifier
        tx_packets: Packets transmitted by the source
        rx_packets: Packets received at the destination
        rx_bytes: Bytes received at the destination
        delay_sum: Sum of one-way delays over received packets (s)
        tx_bytes: Bytes transmitted by the source
        source: Source address
        destination: Destination address
        source_port: Source port
        destination_port: Destination port
    """
    flow_id: int
    tx_packets: int
    rx_packets: int
    rx_bytes: int
    delay_sum: float
    tx_bytes: int = 0
    source: Optional[str] = None
    destination: Optional[str] = None
    source_port: Optional[int] = None
    destination_port: Optional[int] = None

    @property
    def lost_packets(self) -> int:
        return max(self.tx_packets - self.rx_packets, 0)

    def get_mean_delay(self) -> Optional[float]:
        """Mean one-way delay (s), None if nothing was received"""
        if self.rx_packets <= 0:
            return None
        return self.delay_sum / self.rx_packets


@dataclass(frozen=True)
class AggregateReport:
    """
    Summary metrics over one run's flows

    Fields set to None mean "no data": no packets were sent (delivery
    ratio), no flow delivered anything (mean delay) or no flow was
    recorded at all (every metric).
    """
    total_throughput_mbps: Optional[float]
    total_packets_sent: Optional[int]
    total_packets_received: Optional[int]
    delivery_ratio_percent: Optional[float]
    mean_delay_ms: Optional[float]
    flows_with_deliveries: int
    flow_count: int
    duration: float

    @property
    def has_data(self) -> bool:
        return self.flow_count > 0

    def to_dict(self) -> Dict:
        return asdict(self)

    def print_summary(self):
        """Print formatted report"""
        def fmt(value, spec: str, unit: str = "") -> str:
            if value is None:
                return "n/a"
            return f"{value:{spec}}{unit}"

        print("\n" + "="*60)
        print("FLOW STATISTICS SUMMARY")
        print("="*60)
        print(f"  Flows: {self.flow_count} ({self.flows_with_deliveries} with deliveries)")
        print(f"  Total throughput: {fmt(self.total_throughput_mbps, '.4f', ' Mbps')}")
        print(f"  Packets sent: {fmt(self.total_packets_sent, 'd')}")
        print(f"  Packets received: {fmt(self.total_packets_received, 'd')}")
        print(f"  Delivery ratio: {fmt(self.delivery_ratio_percent, '.2f', '%')}")
        print(f"  Mean delay: {fmt(self.mean_delay_ms, '.2f', ' ms')}")
        print("="*60)


class FlowStatsAggregator:
    """
    Aggregates FlowRecords into an AggregateReport

    The mean delay is the unweighted mean of per-flow mean delays over
    flows that received at least one packet, not a packet-weighted mean.
    """

    def __init__(self, duration: float):
        """
        Initialize aggregator

        Args:
            duration: Simulated run duration in seconds (throughput denominator)
        """
        if isinstance(duration, bool) or not isinstance(duration, numbers.Real) \
                or not np.isfinite(duration) or duration <= 0:
            raise InvalidConfigurationError(f"duration must be > 0, got {duration!r}")
        self.duration = float(duration)

    def get_flow_throughput_mbps(self, record: FlowRecord) -> float:
        return record.rx_bytes * 8 / self.duration / 1e6

    def aggregate(self, records: Iterable[FlowRecord]) -> AggregateReport:
        """
        Compute the summary report

        Args:
            records: Final per-flow counters of a completed run

        Returns:
            Aggregate report (no-data fields when records is empty)
        """
        records = list(records)
        if not records:
            warnings.warn(
                "No flows were recorded; report contains no data",
                EmptyFlowDataWarning
            )
            return AggregateReport(
                total_throughput_mbps=None,
                total_packets_sent=None,
                total_packets_received=None,
                delivery_ratio_percent=None,
                mean_delay_ms=None,
                flows_with_deliveries=0,
                flow_count=0,
                duration=self.duration
            )

        throughputs = np.array([self.get_flow_throughput_mbps(r) for r in records])
        total_sent = int(sum(r.tx_packets for r in records))
        total_received = int(sum(r.rx_packets for r in records))

        delivery_ratio = None
        if total_sent > 0:
            delivery_ratio = 100.0 * total_received / total_sent

        flow_delays = [r.get_mean_delay() for r in records if r.rx_packets > 0]
        mean_delay_ms = None
        if flow_delays:
            mean_delay_ms = float(np.mean(flow_delays)) * 1000

        return AggregateReport(
            total_throughput_mbps=float(throughputs.sum()),
            total_packets_sent=total_sent,
            total_packets_received=total_received,
            delivery_ratio_percent=delivery_ratio,
            mean_delay_ms=mean_delay_ms,
            flows_with_deliveries=len(flow_delays),
            flow_count=len(records),
            duration=self.duration
        )

    def to_dataframe(self, records: Iterable[FlowRecord]) -> pd.DataFrame:
        """Per-flow counters and derived metrics, one row per flow"""
        rows: List[Dict] = []
        for r in records:
            row = asdict(r)
            mean_delay = r.get_mean_delay()
            row["throughput_mbps"] = self.get_flow_throughput_mbps(r)
            row["mean_delay_ms"] = mean_delay * 1000 if mean_delay is not None else np.nan
            row["delivery_ratio_percent"] = (
                100.0 * r.rx_packets / r.tx_packets if r.tx_packets > 0 else np.nan
            )
            row["lost_packets"] = r.lost_packets
            rows.append(row)
        columns = [
            "flow_id", "source", "source_port", "destination", "destination_port",
            "tx_packets", "rx_packets", "tx_bytes", "rx_bytes", "delay_sum",
            "lost_packets", "throughput_mbps", "mean_delay_ms", "delivery_ratio_percent"
        ]
        return pd.DataFrame(rows, columns=columns)

    def save_to_json(self, records: Iterable[FlowRecord], filepath: str):
        """Save report and per-flow records to a JSON file"""
        records = list(records)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", EmptyFlowDataWarning)
            report = self.aggregate(records)
        data = {
            "summary": report.to_dict(),
            "flows": [asdict(r) for r in records]
        }
        with open(filepath, 'w') as f:
            json.dump(data, f, indent=2)
