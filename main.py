#!/usr/bin/env python3
"""
📈 PORTFOLIO ADVISOR - Command line entry point
===============================================

Usage:
    python main.py add AAPL "Apple Inc." --quantity 3 --cost 150
    python main.py analyze          # refresh prices, SMA200 and EMA-trend
    python main.py allocate         # run the three strategies on the budget
    python main.py history          # weekly equity curves as JSON
"""

import argparse
import json
import logging
import sys
from datetime import date

from config.settings import DATABASE_PATH, DATA_CONFIG, FMP_API_KEY, FMP_BASE_URL, INDICATOR_CONFIG
from core.logger import setup_logger
from core.exceptions import AdvisorError
from allocation import AllocationService, StrategyTag
from analysis import PortfolioAnalyzer, PortfolioManager, summarize_logs
from data.manager import DataManager
from data.providers.factory import ProviderFactory
from data.storage.database import Database
from simulation import PortfolioHistorySimulator

logger = logging.getLogger("core.main")

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='📈 Portfolio Advisor - SMA200 / EMA-trend allocation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py add MSFT "Microsoft" --quantity 2 --cost 310.5
  python main.py budget 150,50
  python main.py delete-batch 4 --strategy ema-trend-pair
  python main.py history --as-of 2025-06-30
        """
    )
    parser.add_argument('--db', type=str, default=str(DATABASE_PATH), help='SQLite database path')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('add', help='Add or replace a holding')
    p.add_argument('ticker')
    p.add_argument('name', nargs='?', default='')
    p.add_argument('--quantity', type=float, default=0.0)
    p.add_argument('--cost', type=float, default=0.0, help='Average cost per share')

    p = sub.add_parser('update', help='Set quantity and average cost of a holding')
    p.add_argument('ticker')
    p.add_argument('--quantity', type=float, required=True)
    p.add_argument('--cost', type=float, required=True)

    p = sub.add_parser('remove', help='Remove a holding')
    p.add_argument('ticker')

    sub.add_parser('list', help='Show holdings')

    p = sub.add_parser('search', help='Search tickers (FMP)')
    p.add_argument('query')

    p = sub.add_parser('budget', help='Set the budget for the next run (decimal comma accepted)')
    p.add_argument('amount')

    sub.add_parser('analyze', help='Refresh prices and indicators')
    sub.add_parser('allocate', help='Allocate the budget')
    sub.add_parser('logs', help='Show the allocation logs')

    p = sub.add_parser('delete-log', help='Delete one log entry')
    p.add_argument('log_id', type=int)

    p = sub.add_parser('delete-batch', help='Delete a whole batch')
    p.add_argument('batch_id', type=int)
    p.add_argument('--strategy', choices=[t.value for t in StrategyTag], help='Only this strategy')

    p = sub.add_parser('history', help='Weekly portfolio value per strategy (JSON)')
    p.add_argument('--as-of', type=date.fromisoformat, default=None, help='Last day (YYYY-MM-DD)')

    return parser

def print_holdings(holdings):
    print(f"{'TICKER':<8} {'QTY':>10} {'AVG COST':>10} {'PRICE':>10} {'SMA200':>10} {'EMA':>9}  RECOMMENDATION")
    for h in holdings:
        flag = "↓" if h.below_ma else " "
        print(f"{h.ticker:<8} {h.quantity:>10.2f} {h.average_cost:>10.2f} {h.current_price:>10.2f} "
              f"{h.sma200:>10.2f}{flag} {h.ema_trend:>8.4f}  {h.recommendation}")

def print_logs(db: Database):
    entries = [d for tag in StrategyTag for d in db.list_decisions(tag)]
    summary = summarize_logs(entries)

    print(f"Entries: {summary.total_entries}  Total: {summary.total_amount:.2f}")
    if summary.most_frequent_ticker:
        print(f"Most frequent: {summary.most_frequent_ticker} ({summary.most_frequent_count})")
    if summary.highest_invested_ticker:
        print(f"Highest invested: {summary.highest_invested_ticker} ({summary.highest_invested_amount:.2f})")

    for batch_id, batch in summary.batches:
        print(f"\n=== Batch {batch_id} ===")
        for d in batch:
            print(f"  #{d.log_id:<5} {d.strategy.value:<19} {d.ticker:<8} {d.invested_amount:>10.2f} "
                  f"{d.quantity_delta:>10.4f} @ {d.price_per_share:.2f}  {d.timestamp:%Y-%m-%d %H:%M}")

def run_command(args, db: Database) -> int:
    factory = ProviderFactory({**DATA_CONFIG, "FMP_API_KEY": FMP_API_KEY, "FMP_BASE_URL": FMP_BASE_URL})
    data_manager = DataManager(factory, db)
    manager = PortfolioManager(db, data_manager)

    if args.command == 'add':
        manager.add_holding(args.ticker, args.name, args.quantity, args.cost)
    elif args.command == 'update':
        if manager.update_holding(args.ticker, args.quantity, args.cost) is None:
            print(f"{args.ticker.upper()} is not in the portfolio")
            return 1
    elif args.command == 'remove':
        if not manager.remove_holding(args.ticker):
            print(f"{args.ticker.upper()} is not in the portfolio")
            return 1
    elif args.command == 'list':
        print_holdings(manager.list_holdings())
        budget = db.load_budget()
        print(f"\nBudget: {budget.amount:.2f} (next batch {budget.next_batch_id})")
    elif args.command == 'search':
        for r in manager.search(args.query):
            print(f"{r.ticker:<10} {r.name:<40} {r.currency:<4} {r.exchange}")
    elif args.command == 'budget':
        state = manager.set_budget(args.amount)
        print(f"Budget: {state.amount:.2f}")
    elif args.command == 'analyze':
        analyzer = PortfolioAnalyzer(data_manager, db,
                                     INDICATOR_CONFIG["SMA_PERIOD"], INDICATOR_CONFIG["EMA_TREND_PERIOD"])
        report = analyzer.analyze()
        print_holdings(report.holdings)
        for item in report.results.results:
            if not item.ok or item.message:
                print(f"{'✅' if item.ok else '❌'} {item.key}: {item.message}")
        return 0 if report.results.ok else 2
    elif args.command == 'allocate':
        plan, report = AllocationService(db).run()
        for tag, decisions in plan.decisions.items():
            print(f"[{tag.value}] {len(decisions)} decisions")
            for d in decisions:
                print(f"  {d.ticker:<8} {d.invested_amount:>10.2f}  {d.quantity_delta:>10.4f}")
        if plan.rolled_over:
            print(f"Nothing below SMA200, budget {plan.budget:.2f} rolls over")
        return 0 if report.ok else 2
    elif args.command == 'logs':
        print_logs(db)
    elif args.command == 'delete-log':
        if not db.delete_decision(args.log_id):
            print(f"Log entry {args.log_id} not found")
            return 1
    elif args.command == 'delete-batch':
        tag = StrategyTag(args.strategy) if args.strategy else None
        print(f"Deleted {db.delete_batch(args.batch_id, tag)} entries")
    elif args.command == 'history':
        simulator = PortfolioHistorySimulator()
        decisions = [d for tag in simulator.strategies for d in db.list_decisions(tag)]
        prices = data_manager.get_many(d.ticker for d in decisions)
        points = simulator.simulate(decisions, prices, as_of=args.as_of)
        print(json.dumps([p.to_dict() for p in points], indent=2))

    return 0

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(level="DEBUG" if args.verbose else None)

    try:
        with Database(args.db) as db:
            return run_command(args, db)
    except (AdvisorError, ValueError) as e:
        logger.error(f"❌ {e}")
        return 1
    except KeyboardInterrupt:
        print("\n⏸️  Interrupted")
        return 130

if __name__ == "__main__":
    sys.exit(main())
