"""
Basic Usage Example for the EV charger fleet simulator.

This example demonstrates how to:
1. Describe a charging site as a simulation config
2. Run the simulation engine
3. Examine daily results and run statistics
"""

from evsim import (
    ChargerGroup,
    SimulationConfig,
    SimulationEngine,
    REFERENCE_ARRIVAL_PROFILE,
    REFERENCE_DEMAND_TABLE,
    aggregate_results,
)


def main():
    print("=" * 60)
    print("EV Charger Fleet Simulation - Basic Usage")
    print("=" * 60)
    
    # Step 1: Describe the site
    print("\n1. Creating simulation configuration...")
    config = SimulationConfig.from_charger_groups(
        [
            ChargerGroup(power_kw=22.0, count=2, group_id="fast"),
            ChargerGroup(power_kw=11.0, count=6, group_id="standard"),
        ],
        demand_table=REFERENCE_DEMAND_TABLE,      # km -> share of arrivals (%)
        arrival_profile=REFERENCE_ARRIVAL_PROFILE,  # per-hour arrival chance (%)
        consumption_factor=18.0,                  # kWh per 100 km
        horizon_days=365,
        seed=1
    )
    print(f"   Chargers: {config.chargers}")
    print(f"   Theoretical max power: {config.total_power_kw:.1f}kW")
    
    # Step 2: Run the engine
    print("\n2. Running simulation...")
    engine = SimulationEngine(config)
    result = engine.run()
    print(f"   {result}")
    
    # Step 3: Daily results
    print("\n3. First 5 days:")
    for day, day_result in enumerate(result.results[:5]):
        print(f"     Day {day}: peak {day_result.max_power_kw:.1f}kW, "
              f"energy {day_result.energy_consumed_kwh:.2f}kWh")
    
    # Step 4: Run statistics
    print("\n4. Summary:")
    summary = engine.get_simulation_summary()
    print(f"   Arrivals: {summary.total_arrivals}")
    print(f"   Dropped: {summary.total_dropped} "
          f"({summary.blocking_probability * 100:.2f}%)")
    print(f"   Energy: {summary.total_energy_kwh:.1f}kWh")
    print(f"   Concurrency factor: {summary.concurrency_factor:.3f}")
    
    # Step 5: Monthly view
    print("\n5. Monthly energy:")
    monthly = aggregate_results(result, freq='month')
    for period, row in monthly.iterrows():
        print(f"     {period.strftime('%b')}: {row['energy_consumed_kwh']:.1f}kWh, "
              f"peak {row['max_power_kw']:.1f}kW")
    
    print("\n" + "=" * 60)
    print("Example completed successfully!")
    print("=" * 60)


if __name__ == '__main__':
    main()
