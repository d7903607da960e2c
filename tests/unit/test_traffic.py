"""
Echo traffic model tests.
"""

import pytest

from access_network import AddressAllocator, EchoTrafficModel, build_topology


def run_model(sites, devices, duration, **kwargs):
    topology = build_topology(sites, devices)
    plan = AddressAllocator().allocate(topology)
    model = EchoTrafficModel(**kwargs)
    return topology, plan, model, model.run(topology, plan, duration)


def test_client_schedule():
    topology = build_topology(2, 3)
    clients = EchoTrafficModel(clients_per_site=5).get_clients(topology)

    assert len(clients) == 10
    assert [c.node_id for c in clients[:5]] == ["DEV_0_0", "DEV_0_1", "DEV_0_2", "DEV_0_0", "DEV_0_1"]
    last = clients[-1]
    assert last.site_index == 1
    assert last.start_time == pytest.approx(2.0 + 0.5 + 0.4)
    assert last.interval == pytest.approx(1.1)
    assert len({c.source_port for c in clients}) == 10


def test_no_devices_no_flows():
    _, _, _, records = run_model(3, 0, 60.0)
    assert records == []


def test_fibre_site_delivers_everything():
    topology, plan, model, records = run_model(1, 1, 60.0, clients_per_site=1)
    assert len(records) == 2
    up, down = records

    # requests every second from t=2s until the 60s stop
    assert up.tx_packets == 58
    assert up.rx_packets == 58
    assert down.tx_packets == 58
    assert down.rx_packets == 58

    delay = model.get_one_way_delay(topology.get_path_links("DEV_0_0", "SERVER"))
    assert delay == pytest.approx(0.00709, abs=1e-4)
    assert up.get_mean_delay() == pytest.approx(delay)
    assert up.rx_bytes == 58 * 1052
    assert up.source == "192.168.0.2"
    assert up.destination == "10.0.0.1"
    assert up.destination_port == 9
    assert down.source == "10.0.0.1"


def test_replies_in_flight_at_stop_are_lost():
    """Satellite site: the last echo reply is still in flight at the end of the run"""
    _, _, _, records = run_model(3, 1, 10.0, clients_per_site=1)
    assert len(records) == 6
    up, down = records[4], records[5]

    assert up.tx_packets == 6
    assert up.rx_packets == 6
    assert down.tx_packets == 6
    assert down.rx_packets == 5
    assert up.get_mean_delay() > 0.6


def test_flow_ids_unique():
    _, _, _, records = run_model(4, 2, 30.0)
    ids = [r.flow_id for r in records]
    assert ids == list(range(1, len(records) + 1))


def test_run_shorter_than_first_request_has_no_flows():
    """Clients start at 2s; nothing is sent before the run stops"""
    _, _, _, records = run_model(2, 2, 1.5)
    assert records == []


def test_request_without_reply_flow():
    """Satellite request still in flight at the stop: no reply flow is recorded"""
    _, _, _, records = run_model(3, 1, 3.3, clients_per_site=1)
    assert len(records) == 5
    last = records[-1]
    assert last.tx_packets == 1
    assert last.rx_packets == 0
    assert last.destination == "10.0.0.1"
    assert all(r.tx_packets > 0 for r in records)
