"""
Flow statistics aggregation tests.
"""

import json
import math

import pytest

from access_network import (
    FlowRecord,
    FlowStatsAggregator,
    EmptyFlowDataWarning,
    InvalidConfigurationError
)


def two_flows():
    return [
        FlowRecord(flow_id=1, tx_packets=100, rx_packets=100, rx_bytes=102400, delay_sum=1.0),
        FlowRecord(flow_id=2, tx_packets=100, rx_packets=50, rx_bytes=51200, delay_sum=0.6),
    ]


def test_two_flow_report():
    report = FlowStatsAggregator(60.0).aggregate(two_flows())

    assert report.total_throughput_mbps == pytest.approx((102400 + 51200) * 8 / 60 / 1e6)
    assert report.total_throughput_mbps == pytest.approx(0.0205, abs=1e-4)
    assert report.total_packets_sent == 200
    assert report.total_packets_received == 150
    assert report.delivery_ratio_percent == pytest.approx(75.0)
    assert report.mean_delay_ms == pytest.approx(11.0)
    assert report.flows_with_deliveries == 2
    assert report.flow_count == 2
    assert report.has_data


def test_mean_delay_is_unweighted():
    """Mean of per-flow means differs from the packet-weighted mean"""
    report = FlowStatsAggregator(60.0).aggregate(two_flows())
    packet_weighted_ms = (1.0 + 0.6) / 150 * 1000
    assert report.mean_delay_ms != pytest.approx(packet_weighted_ms)


def test_flows_without_deliveries_excluded_from_delay():
    records = two_flows() + [
        FlowRecord(flow_id=3, tx_packets=10, rx_packets=0, rx_bytes=0, delay_sum=0.0)
    ]
    report = FlowStatsAggregator(60.0).aggregate(records)
    assert report.flows_with_deliveries == 2
    assert report.flow_count == 3
    assert report.mean_delay_ms == pytest.approx(11.0)
    assert report.delivery_ratio_percent == pytest.approx(150 / 210 * 100)


def test_zero_delivery_is_not_no_data():
    records = [FlowRecord(flow_id=1, tx_packets=20, rx_packets=0, rx_bytes=0, delay_sum=0.0)]
    report = FlowStatsAggregator(10.0).aggregate(records)
    assert report.delivery_ratio_percent == 0.0
    assert report.mean_delay_ms is None
    assert report.total_throughput_mbps == 0.0


def test_nothing_sent_has_no_ratio():
    records = [FlowRecord(flow_id=1, tx_packets=0, rx_packets=0, rx_bytes=0, delay_sum=0.0)]
    report = FlowStatsAggregator(10.0).aggregate(records)
    assert report.total_packets_sent == 0
    assert report.delivery_ratio_percent is None


def test_empty_flow_set():
    with pytest.warns(EmptyFlowDataWarning):
        report = FlowStatsAggregator(60.0).aggregate([])
    assert not report.has_data
    assert report.delivery_ratio_percent is None
    assert report.mean_delay_ms is None
    assert report.total_throughput_mbps is None
    assert report.flows_with_deliveries == 0


@pytest.mark.parametrize("duration", [0, -1.0, float("nan"), True, "60"])
def test_invalid_duration(duration):
    with pytest.raises(InvalidConfigurationError):
        FlowStatsAggregator(duration)


def test_report_is_recomputed_fresh():
    aggregator = FlowStatsAggregator(60.0)
    records = two_flows()
    assert aggregator.aggregate(records) == aggregator.aggregate(records)
    assert aggregator.aggregate(records[:1]).total_packets_sent == 100


def test_dataframe():
    df = FlowStatsAggregator(60.0).to_dataframe(two_flows() + [
        FlowRecord(flow_id=3, tx_packets=5, rx_packets=0, rx_bytes=0, delay_sum=0.0)
    ])
    assert list(df["flow_id"]) == [1, 2, 3]
    assert df.loc[0, "mean_delay_ms"] == pytest.approx(10.0)
    assert df.loc[1, "mean_delay_ms"] == pytest.approx(12.0)
    assert math.isnan(df.loc[2, "mean_delay_ms"])
    assert df.loc[1, "delivery_ratio_percent"] == pytest.approx(50.0)
    assert df.loc[1, "lost_packets"] == 50
    assert df["throughput_mbps"].sum() == pytest.approx(0.02048)


def test_save_to_json(tmp_path):
    path = tmp_path / "flowmon.json"
    FlowStatsAggregator(60.0).save_to_json(two_flows(), str(path))
    with open(path) as f:
        data = json.load(f)
    assert data["summary"]["total_packets_sent"] == 200
    assert len(data["flows"]) == 2


def test_print_summary_no_data(capsys):
    with pytest.warns(EmptyFlowDataWarning):
        report = FlowStatsAggregator(60.0).aggregate([])
    report.print_summary()
    out = capsys.readouterr().out
    assert "Delivery ratio: n/a" in out
    assert "Mean delay: n/a" in out
