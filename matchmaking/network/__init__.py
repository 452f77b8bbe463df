"""Network graph projection and insights."""

from .graph_builder import (
    NetworkConfig,
    NetworkNode,
    NetworkEdge,
    NetworkCluster,
    NetworkGraphData,
    NetworkGraphBuilder,
    build_graph,
    CLUSTER_NAMES,
    NEUTRAL,
)
from .insights import NetworkInsights, compute_insights

__all__ = [
    "NetworkConfig",
    "NetworkNode",
    "NetworkEdge",
    "NetworkCluster",
    "NetworkGraphData",
    "NetworkGraphBuilder",
    "build_graph",
    "CLUSTER_NAMES",
    "NEUTRAL",
    "NetworkInsights",
    "compute_insights",
]
