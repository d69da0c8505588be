"""
Test: settings and runtime wiring.
"""

import pytest
from pydantic import ValidationError

from atlas.config import AtlasSettings
from atlas.exceptions import DatasetError
from atlas.graph.scenario import ImpactDirection
from atlas.runtime import create_runtime
from atlas.tests.fixtures import chain_graph


class TestSettings:
    def test_defaults(self):
        settings = AtlasSettings(_env_file=None)
        assert settings.scenario_max_depth == 3
        assert settings.scenario_edge_order == "dataset"
        assert settings.risk_free_rate == pytest.approx(0.035)

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("ATLAS_SCENARIO_MAX_DEPTH", "5")
        monkeypatch.setenv("ATLAS_SCENARIO_EDGE_ORDER", "edge_id")
        settings = AtlasSettings(_env_file=None)
        assert settings.scenario_max_depth == 5
        assert settings.scenario_edge_order == "edge_id"

    def test_validation(self):
        with pytest.raises(ValidationError):
            AtlasSettings(scenario_max_depth=0, _env_file=None)
        with pytest.raises(ValidationError):
            AtlasSettings(scenario_edge_order="random", _env_file=None)


class TestCreateRuntime:
    def test_loads_dataset(self, settings):
        runtime = create_runtime(settings)
        assert runtime.store.stats().total_nodes == 14
        assert runtime.propagator.store is runtime.store
        assert runtime.path_finder.store is runtime.store

    def test_settings_flow_into_engines(self, settings):
        settings = settings.model_copy(update={"scenario_max_depth": 1, "risk_free_rate": 0.01})
        runtime = create_runtime(settings)
        assert runtime.propagator.max_depth == 1
        assert runtime.backtest.risk_free_rate == 0.01
        results = runtime.propagator.run("fed_rate", "increase")
        assert [r.depth for r in results] == [1, 1]

    def test_preloaded_data(self, settings):
        runtime = create_runtime(settings, data=chain_graph())
        results = runtime.propagator.run("A", "decrease")
        assert results[0].direction is ImpactDirection.DOWN

    def test_bad_data_dir(self, settings, tmp_path):
        with pytest.raises(DatasetError):
            create_runtime(settings.model_copy(update={"data_dir": tmp_path}))
