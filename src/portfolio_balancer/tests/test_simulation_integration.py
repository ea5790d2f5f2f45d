# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Integration tests for the rebalancing simulation.

These tests verify:
1. A full simulated day matches a direct computation when randomness is fixed
2. The simulator keeps its invariants over longer random runs
3. Results, Monte Carlo batches and the command line entry point work end to end
"""

import io
import unittest
from decimal import Decimal
from unittest.mock import patch
import numpy as np

from ..__main__ import main
from ..simulation.config import Asset, SimulationConfig, MonteCarloConfig
from ..simulation.decimals import round_places
from ..simulation.monte_carlo import MonteCarloRunner
from ..simulation.portfolio import compute_proportions, total_value
from ..simulation.results import MonteCarloResults, SimulationResults
from ..simulation.sampling import FixedSampler
from ..simulation.simulator import PortfolioSimulator


def expected_rate(rate, annual_growth, adjustment_rate=Decimal("0.01")):
    """One day of mean reversion with no random movement."""
    ideal = rate * annual_growth ** (Decimal(1) / Decimal(365))
    if rate > ideal:
        moved = rate - adjustment_rate * (rate - ideal)
    else:
        moved = rate + adjustment_rate * (ideal - rate)
    return round_places(moved, 10)


class StopSimulation(Exception):
    pass


class FailingSampler:
    """Returns zero moves but raises on the fail_on-th random draw."""

    def __init__(self, fail_on):
        self.fail_on = fail_on
        self.calls = 0

    def sample(self, mean, std_dev):
        if std_dev == 0:
            return float(mean)
        self.calls += 1
        if self.calls == self.fail_on:
            raise RuntimeError("draw failed")
        return 0.0


class TestDeterministicDay(unittest.TestCase):
    """One simulated day with all random draws fixed to zero."""

    def setUp(self):
        """Set up test fixtures."""
        self.config = SimulationConfig.create_default()
        self.lines = []
        self.simulator = PortfolioSimulator(
            self.config,
            sampler=FixedSampler(0),
            shock_sampler=FixedSampler(1000),
            sink=self.lines.append,
        )

    def test_rates_move_by_mean_reversion_only(self):
        """Test every rate against the reversion term toward the grown ideal value."""
        result = self.simulator.step()

        self.assertEqual(result.day, 1)
        self.assertEqual(result.shocked, ())
        for asset in self.config.assets:
            self.assertEqual(result.rates[asset.key],
                             expected_rate(asset.initial_rate, asset.annual_growth),
                             asset.key)
        self.assertEqual(result.rates[Asset.SEK], Decimal(1))
        self.assertEqual(result.rates[Asset.USD], Decimal("8.04"))
        self.assertGreater(result.rates[Asset.BTC], Decimal("90594.66"))

    def test_rebalance_conserves_value(self):
        """Test that the rebalanced holdings are worth the total value."""
        result = self.simulator.step()

        rebalanced_value = total_value(result.amounts_after, result.rates)
        self.assertLess(abs(rebalanced_value - result.total_value), Decimal("1e-4"))
        self.assertEqual(self.simulator.amounts, result.amounts_after)

    def test_first_day_diagnostics(self):
        """Test diagnostics on the first day, before any rebalancing happened."""
        result = self.simulator.step()

        self.assertEqual(result.amounts_before, self.config.initial_amounts())
        self.assertEqual(result.total_value, result.unrebalanced_value)
        self.assertEqual(result.trading_effect, Decimal(0))
        self.assertEqual(result.base_growth, Decimal(1))

    def test_day_counter(self):
        """Test that each step advances the day by one."""
        self.assertEqual(self.simulator.day, 0)
        self.simulator.step()
        second = self.simulator.step()
        self.assertEqual(second.day, 2)
        self.assertEqual(self.simulator.day, 2)

    def test_step_does_not_emit(self):
        """Test that stepping has no output side effect."""
        self.simulator.step()
        self.assertEqual(self.lines, [])


class TestSimulatorOutput(unittest.TestCase):
    """Tests for report lines written to the sink."""

    def test_run_emits_days(self):
        """Test the report of a bounded run."""
        lines = []
        simulator = PortfolioSimulator(
            SimulationConfig.create_default(),
            sampler=FixedSampler(0),
            shock_sampler=FixedSampler(1000),
            sink=lines.append,
        )

        results = simulator.run(2)

        self.assertEqual(results.num_days, 2)
        self.assertTrue(lines[0].startswith("Proportions: {sek: "))
        self.assertIn("start of day 1 balance: {sek: 10000.00, btc: 0.20, usd: 1000.00, goog: 1.00}", lines)
        self.assertTrue(any(line.startswith("start of day 2 balance: ") for line in lines))
        self.assertTrue(any(line.startswith("market movements done, new rates: {sek: 1.00, ") for line in lines))
        self.assertIn("SEK growth: 1.00", lines)
        self.assertTrue(any(line.startswith("Total value: ") and "Trading effect: 0.00" in line
                            for line in lines))

    def test_shock_is_announced(self):
        """Test that a shock day is reported for the shocked asset."""
        lines = []
        # Shock generators draw in asset order: btc, usd, goog
        simulator = PortfolioSimulator(
            SimulationConfig.create_default(),
            sampler=FixedSampler(0),
            shock_sampler=FixedSampler([0, 1000, 1000, 1000]),
            sink=lines.append,
        )

        result = simulator.step()
        simulator.emit(result)

        self.assertEqual(result.shocked, (Asset.BTC,))
        self.assertIn("SHOCK to rate of btc!!!", lines)

    def test_run_without_emit(self):
        lines = []
        simulator = PortfolioSimulator(SimulationConfig.create_default(random_seed=5), sink=lines.append)
        simulator.run(3, emit=False)
        self.assertEqual(lines, [])
        self.assertEqual(simulator.day, 3)

    def test_run_forever_stops_between_days(self):
        """Test that the unbounded loop can be stopped by its sink."""
        def sink(line):
            if line.startswith("start of day 4"):
                raise StopSimulation()

        simulator = PortfolioSimulator(SimulationConfig.create_default(random_seed=2), sink=sink)
        with self.assertRaises(StopSimulation):
            simulator.run_forever()
        self.assertEqual(simulator.day, 4)

    def test_negative_days_raises(self):
        simulator = PortfolioSimulator(SimulationConfig.create_default(random_seed=2), sink=lambda line: None)
        with self.assertRaises(ValueError):
            simulator.run(-1)


class TestSimulatorInvariants(unittest.TestCase):
    """Invariants over longer seeded random runs."""

    def setUp(self):
        """Set up test fixtures."""
        self.config = SimulationConfig.create_default(random_seed=1234)
        self.simulator = PortfolioSimulator(self.config, sink=lambda line: None)

    def test_rates_stay_above_floor(self):
        """Test the floor invariant on every simulated day."""
        for result in self.simulator.iter_days(300):
            for key, rate in result.rates.items():
                self.assertGreaterEqual(rate, self.config.rate_floor, key)

    def test_proportions_are_never_recomputed(self):
        """Test that proportions stay those of the initial holdings."""
        initial = compute_proportions(self.config.initial_amounts(), self.config.initial_rates())
        self.simulator.run(100, emit=False)
        self.assertEqual(dict(self.simulator.proportions), initial)
        self.assertLess(abs(sum(initial.values()) - 1), Decimal("1e-20"))

    def test_value_conserved_every_day(self):
        """Test value conservation after every rebalance."""
        for result in self.simulator.iter_days(100):
            rebalanced_value = total_value(result.amounts_after, result.rates)
            self.assertLess(abs(rebalanced_value - result.total_value), Decimal("1e-3"))

    def test_same_seed_same_path(self):
        """Test that a seeded run is reproducible."""
        other = PortfolioSimulator(SimulationConfig.create_default(random_seed=1234), sink=lambda line: None)
        first = self.simulator.run(50, emit=False).final_day()
        second = other.run(50, emit=False).final_day()
        self.assertEqual(first.rates, second.rates)
        self.assertEqual(first.amounts_after, second.amounts_after)

    def test_failed_day_leaves_state_untouched(self):
        """Test that a day failing midway commits nothing, engine state included."""
        # btc takes the first draw, usd's draw fails once
        simulator = PortfolioSimulator(
            self.config,
            sampler=FailingSampler(fail_on=2),
            shock_sampler=FixedSampler(1000),
            sink=lambda line: None,
        )

        with self.assertRaises(RuntimeError):
            simulator.step()

        self.assertEqual(simulator.day, 0)
        self.assertEqual(simulator.rates, self.config.initial_rates())
        self.assertEqual(simulator.amounts, self.config.initial_amounts())
        self.assertEqual(simulator.rate_engine.ideal_values, self.config.initial_rates())
        for key, ma in simulator.rate_engine.moving_averages.items():
            self.assertEqual(ma.count, 1, key)
            self.assertEqual(ma.total, self.config.initial_rates()[key], key)

        clean = PortfolioSimulator(
            self.config,
            sampler=FixedSampler(0),
            shock_sampler=FixedSampler(1000),
            sink=lambda line: None,
        )
        retried = simulator.step()
        first = clean.step()
        self.assertEqual(retried.day, 1)
        self.assertEqual(retried.rates, first.rates)
        self.assertEqual(retried.amounts_after, first.amounts_after)
        self.assertEqual(simulator.rate_engine.ideal_values, clean.rate_engine.ideal_values)


class TestSimulationResults(unittest.TestCase):
    """Tests for SimulationResults."""

    def setUp(self):
        """Set up test fixtures."""
        simulator = PortfolioSimulator(
            SimulationConfig.create_default(),
            sampler=FixedSampler(0),
            shock_sampler=FixedSampler([0, 1000, 1000, 1000]),
            sink=lambda line: None,
        )
        self.results = simulator.run(4, emit=False)

    def test_to_dataframe(self):
        """Test the per-day DataFrame layout."""
        df = self.results.to_dataframe()

        self.assertEqual(len(df), 4)
        self.assertEqual(df['day'].tolist(), [1, 2, 3, 4])
        for column in ('total_value', 'unrebalanced_value', 'trading_effect', 'base_growth',
                       'rate_sek', 'amount_sek', 'rate_btc', 'amount_goog', 'shocks'):
            self.assertIn(column, df.columns)
        self.assertEqual(df['rate_sek'].tolist(), [1.0] * 4)
        self.assertEqual(df['shocks'].tolist(), [1, 0, 0, 0])

    def test_shock_counts(self):
        counts = self.results.shock_counts()
        self.assertEqual(counts[Asset.BTC], 1)
        self.assertEqual(counts[Asset.USD], 0)

    def test_empty_results(self):
        """Test results of a run without days."""
        results = SimulationResults([], [Asset.SEK])
        self.assertEqual(len(results.to_dataframe()), 0)
        with self.assertRaises(ValueError):
            results.final_day()


class TestMonteCarlo(unittest.TestCase):
    """Tests for MonteCarloRunner and MonteCarloResults."""

    def setUp(self):
        """Set up test fixtures."""
        self.mc_config = MonteCarloConfig(num_simulations=3, num_days=5, random_seed=7)
        self.runner = MonteCarloRunner(SimulationConfig.create_default(), self.mc_config)

    def test_run(self):
        """Test running a small batch."""
        results = self.runner.run()

        self.assertEqual(results.num_simulations, 3)
        percentiles = results.get_percentile_df('total_value')
        self.assertEqual(percentiles.shape, (5, 5))
        self.assertEqual(percentiles.index.tolist(), [1, 2, 3, 4, 5])
        self.assertTrue((percentiles['Top 5%'] >= percentiles['Bottom 5%']).all())

    def test_reproducible_with_seed(self):
        """Test that a seeded batch is reproducible."""
        first = self.runner.run().get_final_values()
        second = MonteCarloRunner(SimulationConfig.create_default(), self.mc_config).run().get_final_values()
        np.testing.assert_array_equal(first, second)

    def test_path_seeds(self):
        """Test that paths get distinct seeds."""
        seeds = self.runner.path_seeds()
        self.assertEqual(len(seeds), 3)
        self.assertEqual(len(set(seeds)), 3)
        unseeded = MonteCarloRunner(config=MonteCarloConfig(num_simulations=2, num_days=1))
        self.assertEqual(unseeded.path_seeds(), [None, None])

    def test_statistics(self):
        """Test summary statistics across paths."""
        results = self.runner.run()
        stats = results.get_statistics('trading_effect')
        for key in ('mean', 'std', 'min', 'max', 'p5', 'p50', 'p95'):
            self.assertIn(key, stats)
        self.assertLessEqual(stats['min'], stats['max'])
        probability = results.probability_rebalancing_wins()
        self.assertGreaterEqual(probability, 0.0)
        self.assertLessEqual(probability, 1.0)

    def test_unknown_column_raises(self):
        results = self.runner.run()
        with self.assertRaises(ValueError):
            results.get_percentile_df('no_such_column')

    def test_empty_results(self):
        """Test aggregation without any simulation."""
        results = MonteCarloResults([])
        self.assertEqual(results.get_statistics(), {})
        self.assertEqual(len(results.get_final_values()), 0)
        self.assertEqual(results.probability_rebalancing_wins(), 0.0)


class TestCommandLine(unittest.TestCase):
    """Tests for python -m portfolio_balancer."""

    def test_bounded_run(self):
        """Test printing a fixed number of days."""
        with patch('sys.stdout', new_callable=io.StringIO) as stdout:
            code = main(['--days', '2', '--seed', '1'])
        self.assertEqual(code, 0)
        output = stdout.getvalue()
        self.assertIn("Proportions: ", output)
        self.assertIn("start of day 2 balance: ", output)
        self.assertNotIn("start of day 3", output)

    def test_monte_carlo_run(self):
        """Test the Monte Carlo summary."""
        with patch('sys.stdout', new_callable=io.StringIO) as stdout:
            code = main(['--simulations', '2', '--days', '3', '--seed', '1'])
        self.assertEqual(code, 0)
        self.assertIn("Simulations: 2 x 3 days", stdout.getvalue())

    def test_invalid_simulations(self):
        """Test that an invalid batch size is reported, not raised."""
        with patch('sys.stderr', new_callable=io.StringIO) as stderr:
            code = main(['--simulations', '0'])
        self.assertEqual(code, 2)
        self.assertIn("Invalid configuration", stderr.getvalue())

    def test_batch_errors_are_not_reported_as_configuration(self):
        """Test that a failure while running the batch propagates."""
        with patch.object(MonteCarloRunner, 'run', side_effect=ValueError("bad path")):
            with patch('sys.stderr', new_callable=io.StringIO) as stderr:
                with self.assertRaises(ValueError):
                    main(['--simulations', '2', '--days', '3', '--seed', '1'])
        self.assertNotIn("Invalid configuration", stderr.getvalue())

    def test_negative_days(self):
        with patch('sys.stderr', new_callable=io.StringIO):
            with self.assertRaises(SystemExit):
                main(['--days', '-1'])


if __name__ == '__main__':
    unittest.main()
