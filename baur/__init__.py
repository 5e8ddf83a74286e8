"""Building blocks for an incremental task runner: input resolution, digests, task execution and output uploads."""

__version__ = "1.0.0"