"""
Summary statistics over a network graph.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Any

import numpy as np

from ..models import MatchType
from .graph_builder import NetworkGraphData

logger = logging.getLogger(__name__)

NO_CLUSTER = "None"
NO_COMMONALITY = "No commonalities yet"
DIVERSIFY_RECOMMENDATION = "Consider exploring more strategic connections for diverse perspectives"
BALANCED_RECOMMENDATION = "Great balance! You have strong strategic connections"


@dataclass
class NetworkInsights:
    """
    Attributes:
        total_connections: Number of edges in the graph
        high_affinity_count: Nodes classified as high-affinity
        strategic_count: Nodes classified as strategic
        average_strength: Mean edge strength as a rounded percentage
        strongest_cluster: Name of the largest cluster
        top_commonality: Most frequent commonality description across edges
        recommendation: Suggestion based on the match type balance
    """
    total_connections: int
    high_affinity_count: int
    strategic_count: int
    average_strength: int
    strongest_cluster: str
    top_commonality: str
    recommendation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalConnections": self.total_connections,
            "highAffinityCount": self.high_affinity_count,
            "strategicCount": self.strategic_count,
            "averageStrength": self.average_strength,
            "strongestCluster": self.strongest_cluster,
            "topCommonality": self.top_commonality,
            "recommendation": self.recommendation,
        }


def compute_insights(graph: NetworkGraphData) -> NetworkInsights:
    """
    Compute headline insights for a network graph.

    Args:
        graph: Graph produced by NetworkGraphBuilder

    Returns:
        NetworkInsights
    """
    type_counts = Counter(node.match_type for node in graph.nodes)
    high_affinity = type_counts.get(MatchType.HIGH_AFFINITY.value, 0)
    strategic = type_counts.get(MatchType.STRATEGIC.value, 0)

    if graph.edges:
        average = int(round(float(np.mean([e.strength for e in graph.edges])) * 100))
    else:
        average = 0

    # max() keeps the first cluster on ties, which is the category order
    strongest = max(graph.clusters, key=lambda c: len(c.node_ids)).name if graph.clusters else NO_CLUSTER

    descriptions = Counter(d for edge in graph.edges for d in edge.commonalities)
    top = descriptions.most_common(1)[0][0] if descriptions else NO_COMMONALITY

    if strategic < high_affinity:
        recommendation = DIVERSIFY_RECOMMENDATION
    else:
        recommendation = BALANCED_RECOMMENDATION

    insights = NetworkInsights(
        total_connections=len(graph.edges),
        high_affinity_count=high_affinity,
        strategic_count=strategic,
        average_strength=average,
        strongest_cluster=strongest,
        top_commonality=top,
        recommendation=recommendation,
    )
    logger.debug(f"Insights for {graph.user_id}: {insights.total_connections} connections, "
                 f"avg strength {insights.average_strength}%")
    return insights
