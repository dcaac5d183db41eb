"""
Tests for agent presets and config persistence.
"""

import pytest

from config.simulation_config import ConfigManager, SimulationConfig


class TestPresets:

    def test_every_listed_agent_resolves(self):
        for name in ConfigManager.available_agents():
            assert ConfigManager.get_config(name).name == name

    def test_lookup_is_case_insensitive(self):
        assert ConfigManager.get_config("  LAVA golem ").name == "Lava Golem"

    @pytest.mark.parametrize("name", ["dragon", "", None])
    def test_unknown_agent_falls_back_to_default(self, name):
        assert ConfigManager.get_config(name) == ConfigManager.default_robot()

    def test_fish_floats(self):
        assert ConfigManager.fish().ground_height == 0.5

    def test_default_inputs_not_shared(self):
        a, b = SimulationConfig(), SimulationConfig()
        a.default_inputs['times'] = 3
        assert b.default_inputs['times'] == 10


class TestPersistence:

    def test_save_and_load(self, tmp_path):
        path = str(tmp_path / "golem.json")
        ConfigManager.save_config(ConfigManager.lava_golem(), path)
        assert ConfigManager.load_config(path) == ConfigManager.lava_golem()

    def test_load_missing_file_gives_default(self, tmp_path):
        assert ConfigManager.load_config(str(tmp_path / "none.json")) == SimulationConfig()

    def test_load_unknown_fields_gives_default(self, tmp_path):
        path = tmp_path / "odd.json"
        path.write_text('{"name": "X", "wings": 2}')
        assert ConfigManager.load_config(str(path)) == SimulationConfig()


class TestSpeedClamp:

    @pytest.mark.parametrize("speed, expected", [
        (0.05, 0.1), (0.1, 0.1), (1.7, 1.7), (3.0, 3.0), (4.0, 3.0), (float("nan"), 1.0),
    ])
    def test_clamp_speed(self, speed, expected):
        assert ConfigManager.clamp_speed(SimulationConfig(), speed) == expected
