"""
Tests for the compile-side BlockProcessor facade.
"""

import pytest

from block_processor import BlockProcessor
from config.simulation_config import ConfigManager
from core.commands import CommandType
from helpers import make_block


@pytest.fixture
def processor():
    return BlockProcessor()


class TestBlockProcessor:

    def test_process_scenario(self, processor, scenario_blocks):
        assert processor.process_blocks(scenario_blocks) is True
        assert processor.was_processing_successful()
        assert [c.type for c in processor.get_commands()] == [
            CommandType.MOVE_FORWARD,
            CommandType.TURN_RIGHT,
            CommandType.TURN_RIGHT,
            CommandType.TURN_RIGHT,
        ]
        assert "for i in range(3):" in processor.get_generated_code()

    def test_accepts_project_dict(self, processor, scenario_blocks):
        processor.process_blocks({"blocks": scenario_blocks, "obstacles": []})
        assert len(processor.get_commands()) == 4

    def test_commands_for_block_include_loop_iterations(self, processor, scenario_blocks):
        processor.process_blocks(scenario_blocks)
        assert len(processor.get_commands_for_block("turn")) == 3
        assert len(processor.get_commands_for_block("move")) == 1
        assert processor.get_commands_for_block("start") == []

    def test_get_commands_returns_copy(self, processor, scenario_blocks):
        processor.process_blocks(scenario_blocks)
        processor.get_commands().clear()
        assert len(processor.get_commands()) == 4

    def test_statistics(self, processor, scenario_blocks):
        processor.process_blocks(scenario_blocks)
        stats = processor.get_statistics()

        assert stats["total_blocks"] == 4
        assert stats["total_commands"] == 4
        assert stats["command_counts"]["move_forward"] == 1
        assert stats["command_counts"]["turn_right"] == 3
        assert stats["command_counts"]["wait"] == 0
        assert stats["travel_distance"] == pytest.approx(1.0)
        assert stats["net_rotation_degrees"] == pytest.approx(270)
        assert stats["estimated_duration_ms"] == pytest.approx(1000 + 3 * 800)
        assert stats["diagnostics"] == 0

    def test_statistics_follow_agent_timing(self, scenario_blocks):
        processor = BlockProcessor(ConfigManager.lava_golem())
        processor.process_blocks(scenario_blocks)
        assert processor.get_statistics()["estimated_duration_ms"] == pytest.approx(1400 + 3 * 1100)

    def test_warnings_do_not_fail_processing(self, processor):
        blocks = [
            make_block("m", "moveForward", steps="far"),
            make_block("x", "teleport", y=10),
        ]
        assert processor.process_blocks(blocks) is True
        assert processor.has_warnings()
        assert len(processor.get_diagnostics_for_block("m")) == 1
        assert len(processor.get_diagnostics_for_block("x")) == 1
        assert len(processor.get_all_diagnostics()) == 2

    def test_reset(self, processor, scenario_blocks):
        processor.process_blocks(scenario_blocks)
        processor.reset()

        assert processor.get_commands() == []
        assert processor.get_generated_code() == ""
        assert not processor.was_processing_successful()
        assert processor.get_statistics()["total_blocks"] == 0
