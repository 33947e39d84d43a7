"""
Services around the allocation core: indicator refresh, holdings bookkeeping and log metrics.
"""
from .portfolio_analyzer import PortfolioAnalyzer, AnalysisReport
from .portfolio_manager import PortfolioManager
from .log_summary import LogSummary, summarize_logs
