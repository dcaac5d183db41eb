"""
Tests for the SimulationController that ties compiler, executor and scene together.
"""

import json
import math

import pytest

from core.executor import ExecutorState
from core.simulation_controller import SimulationController
from helpers import make_block


@pytest.fixture
def controller(clock):
    return SimulationController(clock=clock)


def run_to_idle(controller, clock, step=16, limit=100000):
    while controller.state == ExecutorState.RUNNING and clock.now < limit:
        controller.tick(clock.advance(step))


class TestProjectLoading:

    def test_load_project_file(self, controller, tmp_path, scenario_blocks):
        path = tmp_path / "project.json"
        path.write_text(json.dumps({"blocks": scenario_blocks}))

        data, error = controller.load_project_file(str(path))
        assert error is None
        assert data["blocks"] == scenario_blocks

    def test_missing_file_returns_error(self, controller, tmp_path):
        data, error = controller.load_project_file(str(tmp_path / "nope.json"))
        assert data is None
        assert error

    def test_invalid_json_returns_error(self, controller, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{ not json")
        data, error = controller.load_project_file(str(path))
        assert data is None
        assert error

    def test_load_project_with_scene(self, controller, scenario_blocks):
        controller.load_project({
            "blocks": scenario_blocks,
            "obstacles": [
                {"position": {"x": 0, "y": 0.5, "z": 5}, "size": {"x": 1, "y": 1, "z": 1}},
                "not an obstacle",
            ],
            "agent": "fish",
        })
        assert len(controller.blocks) == 4
        assert len(controller.obstacles) == 1
        assert controller.config.name == "Fish"
        assert controller.get_robot_state().position.y == 0.5

    def test_load_plain_block_list(self, controller, scenario_blocks):
        controller.load_project(scenario_blocks)
        assert [b.id for b in controller.blocks] == ["start", "move", "loop", "turn"]
        assert controller.obstacles == []


class TestRunControl:

    def test_run_scenario_end_to_end(self, controller, clock, scenario_blocks):
        completed = []
        controller.add_command_listener(completed.append)

        commands = controller.run(scenario_blocks)
        assert controller.state == ExecutorState.RUNNING
        run_to_idle(controller, clock)

        assert completed == commands
        assert controller.executed_steps == 4
        state = controller.get_robot_state()
        assert state.position.z == pytest.approx(1.0)
        assert state.heading == pytest.approx(3 * math.pi / 2)
        assert not state.is_moving

    def test_state_listener_receives_updates(self, controller, clock, scenario_blocks):
        states = []
        controller.add_state_listener(states.append)
        controller.run(scenario_blocks)
        controller.tick(clock.advance(500))

        assert states[0].is_moving
        assert states[-1].position.z == pytest.approx(0.5)

    def test_run_reuses_loaded_blocks(self, controller, clock, scenario_blocks):
        controller.load_project(scenario_blocks)
        assert len(controller.run()) == 4

    def test_rerun_resets_step_count(self, controller, clock, scenario_blocks):
        controller.run(scenario_blocks)
        run_to_idle(controller, clock)
        controller.run()
        assert controller.executed_steps == 0

    def test_toggle_pause(self, controller, clock, scenario_blocks):
        controller.run(scenario_blocks)
        controller.toggle_pause()
        assert controller.state == ExecutorState.PAUSED
        controller.toggle_pause()
        assert controller.state == ExecutorState.RUNNING

    def test_stop_and_reset(self, controller, clock, scenario_blocks):
        controller.run(scenario_blocks)
        controller.tick(clock.advance(1000))
        controller.stop()
        assert controller.state == ExecutorState.IDLE
        assert controller.get_robot_state().position.z == pytest.approx(1.0)

        controller.reset()
        assert controller.executed_steps == 0
        assert controller.get_robot_state().position.z == 0.0

    def test_obstacle_blocks_the_run(self, controller, clock):
        controller.load_project({
            "blocks": [make_block("m", "moveForward", steps=50)],
            "obstacles": [{"position": {"x": 0, "y": 0.5, "z": 3}, "size": {"x": 2, "y": 1, "z": 1}}],
        })
        controller.run()
        run_to_idle(controller, clock)

        assert controller.executed_steps == 1
        assert controller.get_robot_state().position.z < 2.5 - 0.75

    def test_diagnostics_exposed(self, controller):
        controller.run([make_block("w", "wait", seconds="soon")])
        diagnostics = controller.get_diagnostics()
        assert len(diagnostics) == 1
        assert diagnostics[0].block_id == "w"


class TestAgentAndSpeed:

    def test_set_agent_keeps_speed(self, controller):
        controller.set_speed(2.0)
        controller.set_agent("Lava Golem")
        assert controller.config.name == "Lava Golem"
        assert controller.get_robot_state().speed == 2.0

    def test_agent_timing_used_by_compiler(self, controller, scenario_blocks):
        controller.set_agent("lava golem")
        commands = controller.run(scenario_blocks)
        assert commands[0].duration == 1400.0

    def test_unknown_agent_falls_back_to_robot(self, controller):
        controller.set_agent("dragon")
        assert controller.config.name == "Robot"

    def test_speed_clamped(self, controller):
        assert controller.set_speed(50) == 3.0
