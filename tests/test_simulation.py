"""
Tests for the run driver and the end-to-end properties of a simulation.
"""

import numpy as np
import pytest

from evsim import (
    REFERENCE_ARRIVAL_PROFILE,
    REFERENCE_DEMAND_TABLE,
    ConfigError,
    InternalInvariantError,
    SimulationConfig,
    SimulationEngine,
    SimulationResult,
    generate_config,
    simulate,
)


def reference_config(n_chargers=1, **kwargs):
    return SimulationConfig(
        chargers=[11.0] * n_chargers,
        demand_table=dict(REFERENCE_DEMAND_TABLE),
        arrival_profile=list(REFERENCE_ARRIVAL_PROFILE),
        consumption_factor=18.0,
        **kwargs
    )


def saturated_config(n_chargers, horizon_days=2):
    """One 18 kWh arrival every hour: deterministic without any randomness."""
    return SimulationConfig(
        chargers=[11.0] * n_chargers,
        demand_table={100: 100.0},
        arrival_profile=[100.0] * 24,
        consumption_factor=18.0,
        horizon_days=horizon_days
    )


class TestRunDriver:
    """Tests for result shape and reductions."""
    
    def setup_method(self):
        self.config = reference_config(n_chargers=3)
        self.result = simulate(self.config)
    
    def test_one_result_per_day(self):
        assert len(self.result.results) == 365
        assert self.result.num_days == 365
    
    def test_custom_horizon(self):
        result = simulate(reference_config(horizon_days=10))
        assert len(result.results) == 10
    
    def test_days_non_negative(self):
        for day in self.result.results:
            assert day.energy_consumed_kwh >= 0
            assert day.max_power_kw >= 0
    
    def test_total_energy_is_exact_sum(self):
        expected = sum(day.energy_consumed_kwh for day in self.result.results)
        assert self.result.total_energy_consumed == expected
    
    def test_total_max_power_is_exact_max(self):
        expected = max(day.max_power_kw for day in self.result.results)
        assert self.result.total_max_power_kw == expected
    
    def test_peak_within_fleet_capacity(self):
        capacity = sum(self.config.chargers)
        for day in self.result.results:
            assert day.max_power_kw <= capacity
    
    def test_wire_shape(self):
        data = self.result.to_dict()
        
        assert set(data) == {'results', 'totalEnergyConsumed', 'totalMaxPowerKw'}
        assert set(data['results'][0]) == {'maxPowerKw', 'energyConsumedKwh'}
        assert len(data['results']) == 365
    
    def test_results_are_immutable(self):
        with pytest.raises(AttributeError):
            self.result.results[0].max_power_kw = 1.0


class TestProperties:
    """End-to-end properties over full runs."""
    
    def test_no_arrivals_means_idle_fleet(self):
        config = reference_config(n_chargers=2)
        config.arrival_profile = [0.0] * 24
        
        result = simulate(config)
        
        for day in result.results:
            assert day.max_power_kw == 0
            assert day.energy_consumed_kwh == 0
        assert result.total_energy_consumed == 0
    
    def test_zero_demand_only(self):
        config = reference_config(n_chargers=1)
        config.demand_table = {0: 100.0}
        
        result = simulate(config)
        
        assert result.total_energy_consumed == 0
        assert result.total_max_power_kw == 0
    
    def test_deterministic_for_seed(self):
        first = simulate(reference_config(n_chargers=4, seed=42))
        second = simulate(reference_config(n_chargers=4, seed=42))
        assert first == second
    
    def test_deterministic_for_generator(self):
        config = reference_config(n_chargers=4)
        first = simulate(config, np.random.default_rng(123))
        second = simulate(config, np.random.default_rng(123))
        assert first.results == second.results
    
    def test_seed_changes_outcome(self):
        first = simulate(reference_config(seed=1))
        second = simulate(reference_config(seed=2))
        assert first.results != second.results
    
    def test_saturated_single_unit(self):
        """Each session holds the unit for two hours, so every other arrival drops."""
        result = simulate(saturated_config(1))
        
        assert [d.energy_consumed_kwh for d in result.results] == [216.0, 216.0]
        assert [d.max_power_kw for d in result.results] == [11.0, 11.0]
    
    def test_saturated_two_units(self):
        result = simulate(saturated_config(2))
        
        # 11 kWh in the first hour, then 11 + 7 kWh every hour
        assert [d.energy_consumed_kwh for d in result.results] == [425.0, 432.0]
        assert result.total_max_power_kw == 22.0
    
    def test_more_units_never_reduce_energy(self):
        saturated = [simulate(saturated_config(n)).total_energy_consumed for n in (1, 2, 3)]
        assert saturated == sorted(saturated)
        
        reference = [
            simulate(reference_config(n_chargers=n)).total_energy_consumed
            for n in (1, 2, 4, 8)
        ]
        assert reference == sorted(reference)
    
    def test_reference_single_charger(self):
        result = simulate(reference_config(n_chargers=1))
        
        assert len(result.results) == 365
        peaks = {day.max_power_kw for day in result.results}
        assert peaks <= {0.0, 11.0}
        assert 11.0 in peaks
    
    def test_concurrency_factor_scaling(self):
        factors = []
        for n in range(1, 31):
            result = simulate(reference_config(n_chargers=n))
            factors.append(result.total_max_power_kw / (n * 11.0))
        
        assert all(f <= 1.0 for f in factors)
        for smaller, larger in zip(factors, factors[1:]):
            assert larger <= smaller


class TestEngine:
    """Tests for SimulationEngine bookkeeping and error handling."""
    
    def setup_method(self):
        self.engine = SimulationEngine(generate_config(n_chargers=2))
    
    def test_invalid_config_fails_fast(self):
        config = reference_config()
        config.chargers = []
        
        with pytest.raises(ConfigError) as exc_info:
            simulate(config)
        assert "chargers cannot be empty" in exc_info.value.errors
    
    def test_metrics_history(self):
        self.engine.run()
        
        assert len(self.engine.metrics_history) == 365
        for metrics in self.engine.metrics_history:
            assert metrics.accepted + metrics.dropped == metrics.arrivals
        assert [m.day for m in self.engine.metrics_history][:3] == [0, 1, 2]
    
    def test_summary(self):
        result = self.engine.run()
        summary = self.engine.get_simulation_summary()
        
        assert summary.total_days == 365
        assert summary.num_chargers == 2
        assert summary.total_energy_kwh == result.total_energy_consumed
        assert summary.peak_power_kw == result.total_max_power_kw
        assert summary.total_arrivals > 0
        assert 0.0 <= summary.blocking_probability <= 1.0
        assert summary.concurrency_factor == result.total_max_power_kw / 22.0
        assert 'blocking_probability' in summary.to_dict()
    
    def test_summary_before_run(self):
        summary = self.engine.get_simulation_summary()
        assert summary.total_days == 0
        assert summary.blocking_probability == 0.0
    
    def test_caller_config_changes_do_not_reach_engine(self):
        config = reference_config(n_chargers=2, horizon_days=30)
        engine = SimulationEngine(config)
        config.chargers = [-11.0]
        config.horizon_days = 0
        
        result = engine.run()
        assert result == simulate(reference_config(n_chargers=2, horizon_days=30))
        assert engine.get_simulation_summary().num_chargers == 2
    
    def test_invalidated_engine_config_raises_config_error(self):
        self.engine.config.chargers = [-11.0]
        
        with pytest.raises(ConfigError):
            self.engine.run()
    
    def test_repeated_runs_start_from_idle_pool(self):
        first = self.engine.run()
        second = self.engine.run()
        assert first == second
    
    def test_internal_error_aborts_run(self):
        self.engine.run()
        self.engine.sampler.energy_for_demand = lambda km: -1.0
        
        with pytest.raises(InternalInvariantError):
            self.engine.run()
        assert self.engine.metrics_history == []
        assert self.engine.get_simulation_summary().total_days == 0
    
    def test_reset(self):
        self.engine.run()
        self.engine.reset()
        assert self.engine.get_metrics_data() == []
    
    def test_from_days_requires_results(self):
        with pytest.raises(InternalInvariantError):
            SimulationResult.from_days([])
