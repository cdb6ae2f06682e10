"""Consensus reduction over several model answers.

Answers are grouped by similarity of their normalized text; the largest
group is the consensus. Recurring words across all answers are reported as
themes.
"""

import re
from collections import Counter
from difflib import SequenceMatcher

from modelweave.models import Response
from modelweave.strategies.models import ConsensusResult

_WORD = re.compile(r"\w+")


def normalize_text(text: str) -> str:
    """Lowercase and keep only word characters separated by single spaces."""
    return " ".join(_WORD.findall(text.lower()))


def similarity(a: str, b: str) -> float:
    """Similarity ratio of two normalized texts in [0, 1]."""
    if not a and not b:
        return 1.0
    return SequenceMatcher(None, a, b).ratio()


def cluster_responses(responses: list[Response], threshold: float = 0.8) -> list[list[Response]]:
    """Group responses whose text is at least ``threshold`` similar.

    Each response joins the first cluster whose first member it matches, so
    clusters and their members keep the input order.
    """
    clusters: list[list[Response]] = []
    keys: list[str] = []
    for response in responses:
        key = normalize_text(response.content)
        for index, cluster_key in enumerate(keys):
            if similarity(key, cluster_key) >= threshold:
                clusters[index].append(response)
                break
        else:
            clusters.append([response])
            keys.append(key)
    return clusters


def extract_themes(contents: list[str], limit: int = 10) -> list[str]:
    """Words longer than three characters that occur more than once.

    Ordered by frequency, ties by first appearance.
    """
    counts: Counter[str] = Counter()
    for content in contents:
        counts.update(word for word in content.lower().split() if len(word) > 3)
    recurring = [(word, count) for word, count in counts.items() if count > 1]
    recurring.sort(key=lambda item: item[1], reverse=True)
    return [word for word, _ in recurring[:limit]]


def build_consensus(
    responses: list[Response], threshold: int = 2, similarity_threshold: float = 0.8
) -> ConsensusResult:
    """Reduce responses to their majority cluster.

    Args:
        responses: Successful responses
        threshold: Cluster size needed for ``agreed``
        similarity_threshold: Ratio at which two answers count as the same

    Returns:
        ConsensusResult for the largest cluster (first one on ties)
    """
    if not responses:
        return ConsensusResult()

    clusters = cluster_responses(responses, similarity_threshold)
    majority = max(clusters, key=len)
    return ConsensusResult(
        content=majority[0].content,
        support=len(majority),
        total=len(responses),
        agreed=len(majority) >= threshold,
        themes=extract_themes([response.content for response in responses]),
        model_ids=[response.model_id for response in majority],
    )
