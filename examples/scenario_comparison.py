"""
Scenario Comparison Example.

This example compares fleet usage across the arrival patterns in
ScenarioGenerator for a range of fleet sizes.
"""

from evsim import (
    ScenarioGenerator,
    SimulationEngine,
)


def run_scenario(scenario_key: str, n_chargers: int, power_kw: float = 11.0):
    """Run one scenario and collect statistics."""
    generator = ScenarioGenerator()
    config = generator.generate(scenario_key, [power_kw] * n_chargers, seed=42)
    
    engine = SimulationEngine(config)
    result = engine.run()
    summary = engine.get_simulation_summary()
    
    return {
        'scenario': scenario_key,
        'chargers': n_chargers,
        'energy': result.total_energy_consumed,
        'peak': result.total_max_power_kw,
        'concurrency': summary.concurrency_factor,
        'blocking': summary.blocking_probability * 100.0,
    }


def main():
    print("=" * 70)
    print("Arrival Pattern Comparison")
    print("=" * 70)
    
    results = []
    for scenario_key in ScenarioGenerator.list_scenarios():
        for n_chargers in (1, 2, 5):
            print(f"  {scenario_key} x{n_chargers}...", end=" ")
            results.append(run_scenario(scenario_key, n_chargers))
            print("Done")
    
    print("\n" + "=" * 70)
    print("Results Summary")
    print("=" * 70)
    print(f"{'Scenario':<12} {'Units':<6} {'Energy kWh':<12} {'Peak kW':<9} {'CF':<7} {'Drop%':<7}")
    print("-" * 70)
    
    for result in results:
        print(
            f"{result['scenario']:<12} "
            f"{result['chargers']:<6} "
            f"{result['energy']:<12.1f} "
            f"{result['peak']:<9.1f} "
            f"{result['concurrency']:<7.3f} "
            f"{result['blocking']:<7.2f}"
        )
    
    print("\n" + "=" * 70)
    print("Comparison completed!")
    print("=" * 70)


if __name__ == '__main__':
    main()
