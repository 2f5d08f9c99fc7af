"""
raygauge — time-weighted, index-based accrual engines.

LP escrow time accounting, vote-weighted RAY emission gauge with
rate-matching personal rewarders, and the stake/lock/slash reactor.
"""

__version__ = "0.1.0"
