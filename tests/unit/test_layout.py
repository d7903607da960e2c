"""
Layout tests.
"""

import json
import math

import pytest

from access_network import LayoutEngine, InvalidConfigurationError, build_topology
from access_network.core.layout import build_animation_manifest, save_animation_manifest, describe_nodes


def test_fixed_anchor_positions():
    engine = LayoutEngine()
    assert engine.server_position() == (50.0, 50.0)
    assert engine.core_position() == (50.0, 30.0)


def test_single_site_at_angle_zero():
    engine = LayoutEngine()
    x, y = engine.site_position(0, 1)
    assert x == pytest.approx(70.0)
    assert y == pytest.approx(30.0)


def test_sites_evenly_spaced():
    engine = LayoutEngine()
    cx, cy = engine.core_position()
    for i in range(4):
        x, y = engine.site_position(i, 4)
        assert math.hypot(x - cx, y - cy) == pytest.approx(20.0)
        assert math.atan2(y - cy, x - cx) % (2 * math.pi) == pytest.approx(
            (math.pi / 2 * i) % (2 * math.pi), abs=1e-9
        )


def test_ring_packing():
    """With 25 devices and 20 per ring, device 22 lands on ring 1, slot 2"""
    engine = LayoutEngine(ring_capacity=20)
    assert engine.ring_slot(22) == (1, 2)
    assert engine.ring_slot(19) == (0, 19)
    assert engine.ring_slot(20) == (1, 0)

    sx, sy = engine.site_position(0, 1)
    x, y = engine.device_position(0, 22, 1)
    assert math.hypot(x - sx, y - sy) == pytest.approx(8.0)
    assert x == pytest.approx(sx + 8.0 * math.cos(2 * math.pi * 2 / 20))
    assert y == pytest.approx(sy + 8.0 * math.sin(2 * math.pi * 2 / 20))


def test_layout_is_pure():
    engine = LayoutEngine()
    assert engine.compute(6, 25) == engine.compute(6, 25)
    assert LayoutEngine().compute(6, 25) == engine.compute(6, 25)


def test_zero_sites():
    positions = LayoutEngine().compute(0, 10)
    assert set(positions) == {"SERVER", "CORE"}


def test_apply_sets_every_node():
    topology = build_topology(3, 25)
    positions = LayoutEngine().apply(topology)
    assert len(positions) == topology.get_total_nodes()
    for node_id, node in topology.nodes.items():
        assert node.position == positions[node_id]


def test_animation_manifest(tmp_path):
    topology = build_topology(6, 2)
    positions = LayoutEngine().apply(topology)

    descriptions = describe_nodes(topology)
    assert descriptions["SITE_2"] == "Essos (Satellite)"
    assert descriptions["SITE_5"] == "Nkolbisson (Fibre Optique)"

    manifest = build_animation_manifest(topology, positions)
    nodes = {n["id"]: n for n in manifest["nodes"]}
    assert nodes["SERVER"]["color"] == [0, 0, 255]
    assert nodes["CORE"]["description"] == "WAN Router"
    assert "color" not in nodes["DEV_0_0"]
    assert len(manifest["links"]) == topology.get_total_links()

    path = tmp_path / "anim" / "layout.json"
    save_animation_manifest(manifest, str(path))
    with open(path) as f:
        assert json.load(f) == manifest


def test_invalid_layout_settings():
    with pytest.raises(InvalidConfigurationError):
        LayoutEngine(ring_capacity=0)
    with pytest.raises(InvalidConfigurationError):
        LayoutEngine().site_position(0, 0)
