import unittest
from datetime import datetime

from allocation import (
    EMATrendPairStrategy,
    MAUndervaluedStrategy,
    NaiveProportionalStrategy,
    StrategyTag,
)
from allocation.ma_undervalued import round_half_up
from tests.helpers import holding

TS = datetime(2024, 6, 28, 15, 30)

class TestMAUndervalued(unittest.TestCase):

    def setUp(self):
        self.strategy = MAUndervaluedStrategy(currency_symbol="€")

    def test_scenario_only_undervalued_receives_budget(self):
        holdings = [
            holding("AAA", price=90.0, sma=100.0, quantity=1.0, cost=80.0),
            holding("BBB", price=50.0, sma=40.0, quantity=2.0, cost=45.0),
        ]
        result = self.strategy.allocate(holdings, 100.0, 7, TS)

        self.assertFalse(result.rolled_over)
        self.assertEqual(len(result.decisions), 1)
        d = result.decisions[0]
        self.assertEqual(d.ticker, "AAA")
        self.assertEqual(d.strategy, StrategyTag.MA_UNDERVALUED)
        self.assertEqual(d.batch_id, 7)
        self.assertAlmostEqual(d.invested_amount, 100.0)
        self.assertAlmostEqual(d.quantity_delta, 100.0 / 90.0)
        self.assertEqual(d.price_per_share, 90.0)

        updated = result.updated_holdings["AAA"]
        bought = 100.0 / 90.0
        self.assertEqual(updated.quantity, round(1.0 + bought, 2))
        self.assertAlmostEqual(updated.average_cost, (80.0 * 1.0 + 100.0) / (1.0 + bought))
        self.assertEqual(updated.recommendation, "Invest €100.00")
        self.assertNotIn("BBB", result.updated_holdings)

    def test_quantity_rounds_halves_up(self):
        # 9 / 8 = 1.125 exactly; round() would give 1.12
        holdings = [holding("AAA", price=8.0, sma=10.0)]
        result = self.strategy.allocate(holdings, 9.0, 1, TS)
        self.assertAlmostEqual(result.decisions[0].quantity_delta, 1.125)
        self.assertEqual(result.updated_holdings["AAA"].quantity, 1.13)
        self.assertEqual(round_half_up(0.125), 0.13)
        self.assertEqual(round_half_up(0.004), 0.0)

    def test_input_snapshot_not_mutated(self):
        holdings = [holding("AAA", price=90.0, sma=100.0, quantity=1.0, cost=80.0)]
        self.strategy.allocate(holdings, 100.0, 1, TS)
        self.assertEqual(holdings[0].quantity, 1.0)
        self.assertEqual(holdings[0].recommendation, "")

    def test_weights_sum_to_budget(self):
        holdings = [
            holding("AAA", price=90.0, sma=100.0),
            holding("BBB", price=30.0, sma=45.0),
            holding("CCC", price=8.0, sma=9.0),
        ]
        result = self.strategy.allocate(holdings, 250.0, 1, TS)
        self.assertEqual(len(result.decisions), 3)
        self.assertAlmostEqual(result.invested_total, 250.0)
        # score 10 / 15 / 1 out of 26
        amounts = {d.ticker: d.invested_amount for d in result.decisions}
        self.assertAlmostEqual(amounts["BBB"], 250.0 * 15 / 26)

    def test_rollover_when_nothing_below_sma(self):
        holdings = [
            holding("AAA", price=110.0, sma=100.0, recommendation="Invest €5.00"),
            holding("BBB", price=50.0, sma=40.0),
        ]
        result = self.strategy.allocate(holdings, 100.0, 1, TS)
        self.assertTrue(result.rolled_over)
        self.assertEqual(result.decisions, [])
        self.assertEqual(result.updated_holdings, {})

    def test_missing_indicators_not_eligible(self):
        holdings = [holding("AAA", price=0.0, sma=100.0), holding("BBB", price=10.0, sma=0.0)]
        result = self.strategy.allocate(holdings, 100.0, 1, TS)
        self.assertTrue(result.rolled_over)

    def test_unselected_recommendations_cleared(self):
        holdings = [
            holding("AAA", price=90.0, sma=100.0),
            holding("BBB", price=50.0, sma=40.0, recommendation="Invest €12.00"),
            holding("CCC", price=60.0, sma=40.0),
        ]
        result = self.strategy.allocate(holdings, 100.0, 1, TS)
        self.assertEqual(result.updated_holdings["BBB"].recommendation, "")
        # Nothing to clear for CCC
        self.assertNotIn("CCC", result.updated_holdings)

class TestNaiveProportional(unittest.TestCase):

    def setUp(self):
        self.strategy = NaiveProportionalStrategy()

    def test_split_by_market_value(self):
        holdings = [
            holding("AAA", price=90.0, sma=100.0, quantity=1.0),
            holding("BBB", price=50.0, sma=40.0, quantity=2.0),
        ]
        result = self.strategy.allocate(holdings, 100.0, 3, TS)
        amounts = {d.ticker: d.invested_amount for d in result.decisions}
        self.assertAlmostEqual(amounts["AAA"], 100.0 * 90 / 190)
        self.assertAlmostEqual(amounts["BBB"], 100.0 * 100 / 190)
        self.assertAlmostEqual(result.invested_total, 100.0)
        self.assertEqual(result.updated_holdings, {})
        self.assertTrue(all(d.strategy == StrategyTag.NAIVE_PROPORTIONAL for d in result.decisions))

    def test_zero_value_portfolio_emits_nothing(self):
        holdings = [holding("AAA", price=10.0, quantity=0.0)]
        self.assertEqual(self.strategy.allocate(holdings, 100.0, 1, TS).decisions, [])

    def test_zero_price_skipped(self):
        holdings = [
            holding("AAA", price=0.0, quantity=5.0),
            holding("BBB", price=20.0, quantity=1.0),
        ]
        result = self.strategy.allocate(holdings, 100.0, 1, TS)
        self.assertEqual([d.ticker for d in result.decisions], ["BBB"])
        self.assertAlmostEqual(result.invested_total, 100.0)
        self.assertAlmostEqual(result.decisions[0].quantity_delta, 5.0)

class TestEMATrendPair(unittest.TestCase):

    def setUp(self):
        self.strategy = EMATrendPairStrategy(min_holdings=3)

    def test_scenario_sell_then_weighted_buys(self):
        holdings = [
            holding("XXX", price=10.0, ema=-0.5),
            holding("YYY", price=20.0, ema=0.3),
            holding("ZZZ", price=40.0, ema=0.1),
        ]
        result = self.strategy.allocate(holdings, 100.0, 2, TS)
        self.assertEqual([d.ticker for d in result.decisions], ["XXX", "YYY", "ZZZ"])

        sell, buy1, buy2 = result.decisions
        self.assertEqual(sell.invested_amount, -10.0)
        self.assertEqual(sell.quantity_delta, -1.0)
        self.assertAlmostEqual(buy1.invested_amount, 75.0)
        self.assertAlmostEqual(buy1.quantity_delta, 3.75)
        self.assertAlmostEqual(buy2.invested_amount, 25.0)
        self.assertAlmostEqual(buy2.quantity_delta, 0.625)
        self.assertEqual(result.updated_holdings, {})

    def test_skipped_below_min_holdings(self):
        holdings = [holding("XXX", price=10.0, ema=-0.5), holding("YYY", price=20.0, ema=0.3)]
        self.assertEqual(self.strategy.allocate(holdings, 100.0, 1, TS).decisions, [])

    def test_no_buys_unless_both_top_positive(self):
        holdings = [
            holding("XXX", price=10.0, ema=-0.5),
            holding("YYY", price=20.0, ema=0.3),
            holding("ZZZ", price=40.0, ema=-0.1),
        ]
        result = self.strategy.allocate(holdings, 100.0, 1, TS)
        self.assertEqual(len(result.decisions), 1)
        self.assertEqual(result.decisions[0].ticker, "XXX")

    def test_no_sell_when_all_positive(self):
        holdings = [
            holding("XXX", price=10.0, ema=0.05),
            holding("YYY", price=20.0, ema=0.3),
            holding("ZZZ", price=40.0, ema=0.1),
        ]
        result = self.strategy.allocate(holdings, 100.0, 1, TS)
        self.assertEqual([d.ticker for d in result.decisions], ["YYY", "ZZZ"])

    def test_ties_keep_first_encountered(self):
        holdings = [
            holding("AAA", price=10.0, ema=0.2),
            holding("BBB", price=10.0, ema=0.2),
            holding("CCC", price=10.0, ema=0.2),
        ]
        lowest, top = EMATrendPairStrategy.rank(holdings)
        self.assertEqual(lowest.ticker, "AAA")
        self.assertEqual([h.ticker for h in top], ["AAA", "BBB"])

    def test_buy_skipped_without_price(self):
        holdings = [
            holding("XXX", price=10.0, ema=-0.5),
            holding("YYY", price=0.0, ema=0.3),
            holding("ZZZ", price=40.0, ema=0.1),
        ]
        result = self.strategy.allocate(holdings, 100.0, 1, TS)
        self.assertEqual([d.ticker for d in result.decisions], ["XXX", "ZZZ"])

if __name__ == '__main__':
    unittest.main()
