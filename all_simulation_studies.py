"""
Simulation studies for EV charger fleet sizing.

This script runs the studies used to size a charging site:
- Concurrency sweep: 1..30 identical 11 kW chargers on the reference site,
  reporting observed peak power against the theoretical fleet maximum
- Arrival pattern comparison: reference, uniform and commuter arrivals on
  the same fleet
- Seasonal detail: weekly peak power and monthly energy of one run

Figures are written to the results/ directory.
"""

import os
import logging
from typing import Dict, List

import matplotlib.pyplot as plt
import numpy as np

from evsim import (
    ScenarioGenerator,
    SimulationEngine,
    SimulationResult,
    aggregate_results,
    generate_config,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Suppress matplotlib font warnings
logging.getLogger("matplotlib.font_manager").setLevel(logging.ERROR)

RESULTS_DIR = "results"
CHARGER_POWER_KW = 11.0
MAX_CHARGERS = 30


def run_concurrency_sweep(max_chargers: int = MAX_CHARGERS) -> List[Dict]:
    """
    Simulate fleets of 1..max_chargers identical units.

    Returns:
        One row per fleet size with theoretical power, observed peak,
        concurrency factor and blocking probability
    """
    rows = []
    for n in range(1, max_chargers + 1):
        engine = SimulationEngine(generate_config(n_chargers=n, power_kw=CHARGER_POWER_KW))
        engine.run()
        summary = engine.get_simulation_summary()
        rows.append(
            {
                "chargers": n,
                "theoretical_kw": summary.theoretical_max_power_kw,
                "peak_kw": summary.peak_power_kw,
                "concurrency_factor": summary.concurrency_factor,
                "blocking_probability": summary.blocking_probability,
                "energy_kwh": summary.total_energy_kwh,
            }
        )
    return rows


def print_sweep_table(rows: List[Dict]) -> None:
    print("Chargers | Theoretical Max Power (kW) | Actual Max Power (kW) | Concurrency Factor")
    print("---------|---------------------------|----------------------|-------------------")
    for row in rows:
        print(
            f"{row['chargers']:>8} | {row['theoretical_kw']:>25.0f} | "
            f"{row['peak_kw']:>20.2f} | {row['concurrency_factor']:>17.4f}"
        )


def generate_concurrency_plot(rows: List[Dict], output_path: str):
    """
    Plot concurrency factor and blocking probability against fleet size.
    """
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 6))

    x = np.array([r["chargers"] for r in rows])
    factors = [r["concurrency_factor"] for r in rows]
    blocking = [r["blocking_probability"] * 100.0 for r in rows]

    ax1.plot(x, factors, marker="o", color="#1976D2", linewidth=2)
    ax1.set_xlabel("Number of Chargers", fontsize=12, fontweight="bold")
    ax1.set_ylabel("Concurrency Factor", fontsize=12, fontweight="bold")
    ax1.set_title("Peak Power / Theoretical Maximum", fontsize=14, fontweight="bold")
    ax1.grid(True, alpha=0.3)
    ax1.set_ylim([0, 1.05])

    ax2.bar(x, blocking, color="#D32F2F", alpha=0.8)
    ax2.set_xlabel("Number of Chargers", fontsize=12, fontweight="bold")
    ax2.set_ylabel("Dropped Arrivals (%)", fontsize=12, fontweight="bold")
    ax2.set_title("Blocking Probability", fontsize=14, fontweight="bold")
    ax2.grid(True, alpha=0.3, axis="y")

    plt.tight_layout()
    plt.savefig(output_path, dpi=300, bbox_inches="tight")
    plt.close()
    logger.info(f"Saved concurrency sweep to {output_path}")


def run_pattern_comparison(n_chargers: int = 10) -> Dict[str, SimulationResult]:
    """Run every arrival pattern on the same fleet."""
    generator = ScenarioGenerator()
    chargers = [CHARGER_POWER_KW] * n_chargers
    results = {}
    for key in ScenarioGenerator.list_scenarios():
        config = generator.generate(key, chargers)
        results[key] = SimulationEngine(config).run()
    return results


def generate_pattern_comparison(results: Dict[str, SimulationResult], output_path: str):
    """
    Compare total energy and peak power across arrival patterns.
    """
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 6))

    scenarios = list(results.keys())
    x = np.arange(len(scenarios))

    ax1.bar(x, [results[s].total_energy_consumed for s in scenarios], color="#2E7D32", alpha=0.8)
    ax1.set_ylabel("Energy Delivered (kWh)", fontsize=12, fontweight="bold")
    ax1.set_title("Annual Energy", fontsize=14, fontweight="bold")
    ax1.set_xticks(x)
    ax1.set_xticklabels(scenarios)
    ax1.grid(True, alpha=0.3, axis="y")

    ax2.bar(x, [results[s].total_max_power_kw for s in scenarios], color="#F57C00", alpha=0.8)
    ax2.set_ylabel("Peak Power (kW)", fontsize=12, fontweight="bold")
    ax2.set_title("Annual Peak Power", fontsize=14, fontweight="bold")
    ax2.set_xticks(x)
    ax2.set_xticklabels(scenarios)
    ax2.grid(True, alpha=0.3, axis="y")

    plt.tight_layout()
    plt.savefig(output_path, dpi=300, bbox_inches="tight")
    plt.close()
    logger.info(f"Saved pattern comparison to {output_path}")


def generate_seasonal_detail(result: SimulationResult, output_path: str):
    """
    Weekly peak power and monthly energy of one run.
    """
    weekly = aggregate_results(result, freq="week")
    monthly = aggregate_results(result, freq="month")

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(14, 10))

    ax1.bar(weekly.index, weekly["max_power_kw"], color="#dc2626", alpha=0.8)
    ax1.set_xlabel("Week", fontsize=12, fontweight="bold")
    ax1.set_ylabel("Power (kW)", fontsize=12, fontweight="bold")
    ax1.set_title("Weekly Maximum Power", fontsize=14, fontweight="bold")
    ax1.grid(True, alpha=0.3, axis="y")

    labels = [period.strftime("%b") for period in monthly.index]
    ax2.bar(labels, monthly["energy_consumed_kwh"], color="#6A1B9A", alpha=0.8)
    ax2.set_ylabel("Energy (kWh)", fontsize=12, fontweight="bold")
    ax2.set_title("Monthly Energy Consumption", fontsize=14, fontweight="bold")
    ax2.grid(True, alpha=0.3, axis="y")

    plt.tight_layout()
    plt.savefig(output_path, dpi=300, bbox_inches="tight")
    plt.close()
    logger.info(f"Saved seasonal detail to {output_path}")


# =============================================================================
# Main Execution
# =============================================================================


def main():
    """
    Run all simulation studies.
    """
    os.makedirs(RESULTS_DIR, exist_ok=True)

    logger.info("=" * 80)
    logger.info("CONCURRENCY SWEEP")
    logger.info("=" * 80)
    rows = run_concurrency_sweep()
    print_sweep_table(rows)
    generate_concurrency_plot(rows, os.path.join(RESULTS_DIR, "concurrency_sweep.png"))

    logger.info("=" * 80)
    logger.info("ARRIVAL PATTERN COMPARISON")
    logger.info("=" * 80)
    results = run_pattern_comparison()
    generate_pattern_comparison(results, os.path.join(RESULTS_DIR, "pattern_comparison.png"))
    generate_seasonal_detail(
        results["reference"], os.path.join(RESULTS_DIR, "seasonal_detail.png")
    )

    for key, result in results.items():
        logger.info(f"{key}: {result}")

    logger.info("All results saved to: " + RESULTS_DIR)
    return rows, results


if __name__ == "__main__":
    main()
