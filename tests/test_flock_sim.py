import logging

import pytest

import flock_sim
from springflock.data_models import FlockConfig
from springflock.vector_utils import Vector2


@pytest.fixture
def sim():
    sim = flock_sim.SimulationController(300, 200, seed=5)
    sim.load_config(FlockConfig(name="test", members=8))
    return sim


def test_load_config_builds_flock(sim):
    assert sim.member_count() == 8
    assert sim.flock.width == 300
    assert sim.frame == 0


def test_load_config_member_override(sim):
    sim.load_config(FlockConfig(members=8), members=3)
    assert sim.member_count() == 3


def test_step_counts_frames_and_collects_commands(sim):
    for _ in range(6):
        commands = sim.step()
    assert sim.frame == 6
    assert len(commands) == 8


def test_same_seed_same_run():
    def run():
        sim = flock_sim.SimulationController(300, 200, seed=11)
        sim.load_config(FlockConfig(members=5))
        for _ in range(20):
            sim.step()
        return [m.position for m in sim.flock.members]

    assert run() == run()


def test_paused_snapshot_redraws_without_stepping(sim):
    for _ in range(6):
        sim.step()
    sim.playing = False
    positions = [m.position for m in sim.flock.members]
    commands, focus = sim.snapshot()
    assert len(commands) == 8
    assert focus == sim.flock.focus.position.as_tuple()
    assert [m.position for m in sim.flock.members] == positions


def test_magnet_pushes_members(sim):
    body = sim.flock.members[0]
    sim.pointer = (body.position.x + 5, body.position.y)
    sim.magnet_active = True
    sim.flock.auto_move_focus = False
    sim.flock.follows_pointer = False
    before = body.position
    sim.step()
    sim.step()
    assert body.position.x < before.x


def test_membership_and_tuning_helpers(sim):
    sim.add_member_at(10, 10)
    sim.add_members(2)
    assert sim.member_count() == 11
    sim.remove_last()
    assert sim.member_count() == 10
    sim.adjust("increase_spring_length_range")
    assert (sim.flock.spring_length_min, sim.flock.spring_length_max) == (20, 70)


def test_resize_moves_flock_bounds(sim):
    sim.resize(640, 480)
    assert (sim.flock.width, sim.flock.height) == (640, 480)


def test_resolve_config_by_file_display_or_default(caplog):
    assert flock_sim.resolve_config("blue_pink.json").members == 60
    assert flock_sim.resolve_config("Blue to pink").members == 60
    with caplog.at_level(logging.WARNING):
        cfg = flock_sim.resolve_config("nothing-here")
    assert cfg.name == FlockConfig().name
    assert "not found" in caplog.text


def test_headless_main_runs(caplog):
    with caplog.at_level(logging.INFO, logger="springflock.app"):
        flock_sim.main(["--headless-ticks", "100", "--members", "4", "--seed", "1",
                        "--width", "200", "--height", "150"])
    assert "tick 100" in caplog.text


def test_resize_never_collapses_window(sim):
    sim.resize(0, -5)
    assert (sim.flock.width, sim.flock.height) == (1, 1)
    sim.step()
    assert 0 <= sim.flock.focus.position.x <= 1
    assert 0 <= sim.flock.focus.position.y <= 1


def test_safe_point_accepts_vectors():
    assert flock_sim._safe_point(Vector2(3.7, -2.2)) == (3, -2)
    assert flock_sim._safe_point((1e9, 0)) is None
    assert flock_sim._safe_point(None) is None
