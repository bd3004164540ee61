"""Simulations of scheduling, retention and prefetching strategies for edge and serverless computing."""

__version__ = "0.1.0"
__all__ = ["onco", "pbo", "pagurus", "ldls", "prefetch"]