"""Multi-model strategies: parallel, cascade, consensus and best-of-n."""

from modelweave.strategies.consensus import build_consensus, cluster_responses, extract_themes
from modelweave.strategies.engine import StrategyEngine
from modelweave.strategies.models import ConsensusResult, ModelFailure, MultiCallResult, Strategy
from modelweave.strategies.scoring import rank_responses, score_response, select_best

__all__ = [
    "ConsensusResult",
    "ModelFailure",
    "MultiCallResult",
    "Strategy",
    "StrategyEngine",
    "build_consensus",
    "cluster_responses",
    "extract_themes",
    "rank_responses",
    "score_response",
    "select_best",
]
