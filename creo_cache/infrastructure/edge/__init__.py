from .edge_stats import EdgeStatistics, EdgeStatsAdapter

__all__ = ["EdgeStatistics", "EdgeStatsAdapter"]
