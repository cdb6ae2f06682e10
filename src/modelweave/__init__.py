"""modelweave - multi-provider LLM orchestration.

Routes calls across a catalog of providers under per-provider rate limits,
tracks cost, runs multi-model strategies and executes chain graphs.
"""

__version__ = "0.1.0"
