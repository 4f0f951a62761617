"""
Unit tests for SimulationConfig validation.
"""

import unittest

from evsim import (
    REFERENCE_ARRIVAL_PROFILE,
    REFERENCE_DEMAND_TABLE,
    ChargerGroup,
    ConfigError,
    SimulationConfig,
    SimulationEngine,
    expand_charger_groups,
)


class TestSimulationConfig(unittest.TestCase):
    """Test configuration validation."""
    
    def setUp(self):
        """Set up a valid reference config."""
        self.config = SimulationConfig(
            chargers=[11.0, 22.0],
            demand_table=dict(REFERENCE_DEMAND_TABLE),
            arrival_profile=list(REFERENCE_ARRIVAL_PROFILE),
            consumption_factor=18.0
        )
    
    def assertInvalid(self, fragment):
        with self.assertRaises(ConfigError) as ctx:
            self.config.validate()
        self.assertTrue(
            any(fragment in error for error in ctx.exception.errors),
            ctx.exception.errors
        )
    
    def test_reference_config_is_valid(self):
        """Reference weights sum to 99.97, within tolerance."""
        self.config.validate()
        self.assertEqual(self.config.collect_errors(), [])
    
    def test_defaults(self):
        self.assertEqual(self.config.horizon_days, 365)
        self.assertEqual(self.config.seed, 1)
        self.assertFalse(self.config.enable_logging)
        self.assertEqual(self.config.total_power_kw, 33.0)
    
    def test_empty_chargers(self):
        self.config.chargers = []
        self.assertInvalid("chargers cannot be empty")
    
    def test_non_positive_power(self):
        self.config.chargers = [11.0, 0.0]
        self.assertInvalid("chargers[1]")
    
    def test_non_numeric_power(self):
        self.config.chargers = ["11"]
        self.assertInvalid("chargers[0]")
    
    def test_chargers_must_be_sequence(self):
        self.config.chargers = None
        self.assertInvalid("chargers must be a sequence")
        self.config.chargers = 11.0
        self.assertInvalid("chargers must be a sequence")
    
    def test_empty_demand_table(self):
        self.config.demand_table = {}
        self.assertInvalid("demand_table cannot be empty")
    
    def test_demand_weights_must_sum_to_100(self):
        self.config.demand_table = {0: 50.0, 10: 40.0}
        self.assertInvalid("must sum to 100")
    
    def test_negative_demand_key(self):
        self.config.demand_table = {-5: 50.0, 10: 50.0}
        self.assertInvalid("key must be >= 0")
    
    def test_negative_weight(self):
        self.config.demand_table = {0: -10.0, 10: 110.0}
        self.assertInvalid("weight must be >= 0")
    
    def test_demand_table_must_be_mapping(self):
        self.config.demand_table = None
        self.assertInvalid("demand_table must be a mapping")
        self.config.demand_table = [(0, 100.0)]
        self.assertInvalid("demand_table must be a mapping")
    
    def test_arrival_profile_must_be_sequence(self):
        self.config.arrival_profile = None
        self.assertInvalid("arrival_profile must be a sequence")
        self.config.arrival_profile = 5.0
        self.assertInvalid("arrival_profile must be a sequence")
        self.config.arrival_profile = "5" * 24
        self.assertInvalid("arrival_profile must be a sequence")
    
    def test_wrong_types_reported_together(self):
        self.config.chargers = None
        self.config.demand_table = None
        self.config.arrival_profile = None
        self.assertEqual(len(self.config.collect_errors()), 3)
    
    def test_arrival_profile_length(self):
        self.config.arrival_profile = [1.0] * 23
        self.assertInvalid("must contain 24 values")
    
    def test_arrival_profile_range(self):
        self.config.arrival_profile[5] = 100.5
        self.assertInvalid("arrival_profile[5]")
        self.config.arrival_profile[5] = -0.1
        self.assertInvalid("arrival_profile[5]")
    
    def test_arrival_profile_bounds_inclusive(self):
        self.config.arrival_profile = [0.0] * 12 + [100.0] * 12
        self.config.validate()
    
    def test_consumption_factor(self):
        self.config.consumption_factor = 0
        self.assertInvalid("consumption_factor")
    
    def test_horizon_days(self):
        self.config.horizon_days = 0
        self.assertInvalid("horizon_days")
        self.config.horizon_days = True
        self.assertInvalid("horizon_days")
    
    def test_all_errors_reported(self):
        self.config.chargers = []
        self.config.consumption_factor = -1.0
        self.assertEqual(len(self.config.collect_errors()), 2)
    
    def test_config_error_is_value_error(self):
        self.config.chargers = []
        with self.assertRaises(ValueError):
            self.config.validate()
    
    def test_engine_validates_on_construction(self):
        self.config.arrival_profile = []
        with self.assertRaises(ConfigError):
            SimulationEngine(self.config)


class TestChargerGroups(unittest.TestCase):
    """Test expansion of charger groups."""
    
    def test_groups_expand_in_order(self):
        config = SimulationConfig.from_charger_groups(
            [ChargerGroup(22.0, 1, "fast"), ChargerGroup(11.0, 3, "slow")],
            demand_table=REFERENCE_DEMAND_TABLE,
            arrival_profile=REFERENCE_ARRIVAL_PROFILE,
            consumption_factor=18.0,
            horizon_days=30
        )
        self.assertEqual(config.chargers, [22.0, 11.0, 11.0, 11.0])
        self.assertEqual(config.horizon_days, 30)
    
    def test_negative_count(self):
        with self.assertRaises(ConfigError):
            SimulationConfig.from_charger_groups(
                [ChargerGroup(11.0, -1)],
                demand_table=REFERENCE_DEMAND_TABLE,
                arrival_profile=REFERENCE_ARRIVAL_PROFILE,
                consumption_factor=18.0
            )
    
    def test_expand_rejects_negative_count(self):
        with self.assertRaises(ConfigError):
            expand_charger_groups([ChargerGroup(11.0, 2), ChargerGroup(11.0, -1)])
        with self.assertRaises(ConfigError):
            ChargerGroup(11.0, 1.5).expand()
    
    def test_zero_count_group_is_empty(self):
        self.assertEqual(ChargerGroup(11.0, 0).expand(), [])


if __name__ == '__main__':
    unittest.main()
