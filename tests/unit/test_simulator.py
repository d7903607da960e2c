"""
Run orchestration tests.
"""

import json
import os

import pytest

from access_network import (
    Simulator,
    SimulationConfig,
    FlowRecord,
    FlowRecordSource,
    EmptyFlowDataWarning,
    InvalidConfigurationError,
    AddressSpaceExhaustedError,
    run_basic_simulation
)


class FixedFlows(FlowRecordSource):
    """Returns the same records for every run"""

    def __init__(self, records):
        self.records = records
        self.calls = 0

    def run(self, topology, addresses, duration):
        self.calls += 1
        return list(self.records)


def quiet_config(**kwargs):
    kwargs.setdefault("verbose", False)
    return SimulationConfig(**kwargs)


def test_run_default_engine():
    sim = Simulator(quiet_config(site_count=2, devices_per_site=3, simulation_duration=20.0))
    results = sim.run()

    assert len(results.positions) == sim.topology.get_total_nodes()
    assert len(results.addresses.blocks) == 5
    assert results.capture_points == ["CORE_0", "LAN_0", "LAN_1"]
    assert results.report is not None
    assert results.report.flow_count == 2 * 2 * 5
    assert 0 < results.report.delivery_ratio_percent <= 100


def test_custom_engine_report():
    records = [
        FlowRecord(flow_id=1, tx_packets=100, rx_packets=100, rx_bytes=102400, delay_sum=1.0),
        FlowRecord(flow_id=2, tx_packets=100, rx_packets=50, rx_bytes=51200, delay_sum=0.6),
    ]
    engine = FixedFlows(records)
    sim = Simulator(quiet_config(site_count=1, devices_per_site=1), engine=engine)
    report = sim.run().report

    assert engine.calls == 1
    assert report.delivery_ratio_percent == pytest.approx(75.0)
    assert report.mean_delay_ms == pytest.approx(11.0)


def test_flow_monitoring_disabled():
    sim = Simulator(quiet_config(site_count=1, devices_per_site=2, enable_flow_monitoring=False))
    results = sim.run()
    assert results.report is None
    assert results.flows == []


def test_trace_capture_disabled():
    sim = Simulator(quiet_config(site_count=3, devices_per_site=1, enable_trace_capture=False))
    assert sim.run().capture_points == []


def test_zero_sites_report_has_no_data():
    sim = Simulator(quiet_config(site_count=0, devices_per_site=5))
    with pytest.warns(EmptyFlowDataWarning):
        results = sim.run()
    assert results.capture_points == ["CORE_0"]
    assert results.report.delivery_ratio_percent is None
    assert results.report.mean_delay_ms is None


def test_invalid_config_rejected_before_build():
    with pytest.raises(InvalidConfigurationError):
        Simulator(quiet_config(site_count=-2))


def test_address_exhaustion_propagates():
    sim = Simulator(quiet_config(site_count=300, devices_per_site=0))
    with pytest.raises(AddressSpaceExhaustedError):
        sim.run()


def test_save_results(tmp_path):
    sim = Simulator(quiet_config(
        site_count=2, devices_per_site=2, simulation_duration=15.0,
        animation_output_path="anim.json"
    ))
    sim.run()
    sim.save_results(str(tmp_path), prefix="run")

    assert os.path.exists(tmp_path / "anim.json")
    assert os.path.exists(tmp_path / "run-flows.csv")
    with open(tmp_path / "run-flowmon.json") as f:
        data = json.load(f)
    assert data["summary"]["flow_count"] == 20


def test_results_require_run():
    sim = Simulator(quiet_config(site_count=1, devices_per_site=1))
    with pytest.raises(RuntimeError):
        sim.get_results()


def test_run_basic_simulation():
    results = run_basic_simulation(site_count=2, devices_per_site=2, simulation_duration=10.0)
    assert results["network"]["num_nodes"] == 8
    assert results["statistics"]["flow_count"] == 20
    assert results["addresses"]["interfaces"]["SERVER"] == ["10.0.0.1"]


def test_verbose_output(capsys):
    sim = Simulator(SimulationConfig(site_count=2, devices_per_site=1, simulation_duration=10.0))
    sim.run()
    out = capsys.readouterr().out
    assert "Site Mvog-Ada - Technology: 4G/5G" in out
    assert "FLOW STATISTICS SUMMARY" in out


def test_nan_duration_rejected_before_build():
    with pytest.raises(InvalidConfigurationError):
        Simulator(quiet_config(simulation_duration=float("nan"), enable_flow_monitoring=False))


def test_run_without_traffic_reports_no_data():
    sim = Simulator(quiet_config(site_count=2, devices_per_site=2, simulation_duration=1.5))
    with pytest.warns(EmptyFlowDataWarning):
        results = sim.run()
    assert results.flows == []
    assert results.report.flow_count == 0
    assert results.report.total_throughput_mbps is None
    assert results.report.delivery_ratio_percent is None
