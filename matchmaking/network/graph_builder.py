"""
Network graph assembly.

Projects a user's stored matches into nodes, edges and thematic clusters
for visualization. The owner sits at the center as a neutral hub; each
non-passed match contributes a peer node and an owner-peer edge; accepted
connections without a match record appear as unattached neutral nodes.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, Any, List, Optional, Iterable, Tuple

import networkx as nx

from ..configs.loader import CLUSTERING_STRATEGIES
from ..models import Match, UserProfile, utcnow
from ..questionnaire.schema import CATEGORY_ORDER, CommonalityCategory

logger = logging.getLogger(__name__)

NEUTRAL = "neutral"

CLUSTER_NAMES = {
    CommonalityCategory.PROFESSIONAL: "Professional Peers",
    CommonalityCategory.VALUES: "Shared Values",
    CommonalityCategory.LIFESTYLE: "Lifestyle Allies",
    CommonalityCategory.HOBBY: "Shared Interests",
}


@dataclass
class NetworkConfig:
    """
    Configuration for graph assembly.

    Attributes:
        clustering: Clustering strategy name
        include_connections: Add accepted connections without a match as neutral nodes
    """
    clustering: str = "majority_category"
    include_connections: bool = True

    def validate(self) -> None:
        if self.clustering not in CLUSTERING_STRATEGIES:
            raise ValueError(
                f"clustering must be one of {CLUSTERING_STRATEGIES}, got {self.clustering!r}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "NetworkConfig":
        network = config.get("network", {})
        return cls(
            clustering=network.get("clustering", "majority_category"),
            include_connections=network.get("include_connections", True),
        )


@dataclass
class NetworkNode:
    id: str
    name: str
    title: str
    match_type: str
    commonality_count: int = 0
    commonalities: List[str] = field(default_factory=list)
    company: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "name": self.name,
            "title": self.title,
            "matchType": self.match_type,
            "commonalityCount": self.commonality_count,
            "commonalities": list(self.commonalities),
        }
        if self.company:
            result["company"] = self.company
        return result


@dataclass
class NetworkEdge:
    source: str
    target: str
    strength: float
    commonalities: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "strength": float(self.strength),
            "commonalities": list(self.commonalities),
        }


@dataclass
class NetworkCluster:
    id: str
    name: str
    node_ids: List[str]
    theme: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "nodeIds": list(self.node_ids), "theme": self.theme}


@dataclass
class NetworkGraphData:
    user_id: str
    nodes: List[NetworkNode]
    edges: List[NetworkEdge]
    clusters: List[NetworkCluster]
    generated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "clusters": [c.to_dict() for c in self.clusters],
            "generatedAt": self.generated_at.isoformat(),
        }

    def node(self, node_id: str) -> Optional[NetworkNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


class NetworkGraphBuilder:
    """
    Builds NetworkGraphData from a user's matches.

    The intermediate representation is an undirected networkx graph whose
    edges carry the match score and the commonality categories, so the
    clustering strategies can work on graph structure directly.
    """

    def __init__(self, config: Optional[NetworkConfig] = None):
        self.config = config or NetworkConfig()
        self.config.validate()

    def build(
        self,
        user_id: str,
        matches: Iterable[Match],
        connections: Iterable[str] = (),
        profiles: Optional[Dict[str, UserProfile]] = None,
        peer_links: Iterable[Tuple[str, str]] = ()
    ) -> NetworkGraphData:
        """
        Build the network graph for ``user_id``.

        Args:
            user_id: Owner of the matches
            matches: The owner's stored matches; passed ones are skipped
            connections: Peer ids of accepted connections
            profiles: Profiles by user id, used for the owner and connection nodes
            peer_links: Optional peer-to-peer pairs used by connected_components clustering

        Returns:
            NetworkGraphData with nodes, edges and non-overlapping clusters
        """
        profiles = profiles or {}
        graph = nx.Graph()

        owner = profiles.get(user_id)
        graph.add_node(user_id, data=NetworkNode(
            id=user_id,
            name=owner.name if owner else user_id,
            title=_title_of(owner),
            match_type=NEUTRAL,
            company=owner.company if owner else None,
        ))

        edges: List[NetworkEdge] = []
        for match in matches:
            if match.passed or match.user_id != user_id:
                continue
            peer = match.matched_user.profile
            descriptions = [c.description for c in match.commonalities]
            graph.add_node(match.matched_user_id, data=NetworkNode(
                id=match.matched_user_id,
                name=peer.name,
                title=_title_of(peer),
                match_type=match.type.value,
                commonality_count=len(match.commonalities),
                commonalities=descriptions,
                company=peer.company,
            ))
            graph.add_edge(
                user_id, match.matched_user_id,
                strength=match.score,
                categories=[c.category for c in match.commonalities],
            )
            edges.append(NetworkEdge(
                source=user_id,
                target=match.matched_user_id,
                strength=match.score,
                commonalities=descriptions,
            ))

        if self.config.include_connections:
            for peer_id in connections:
                if peer_id == user_id or graph.has_node(peer_id):
                    continue
                profile = profiles.get(peer_id)
                graph.add_node(peer_id, data=NetworkNode(
                    id=peer_id,
                    name=profile.name if profile else peer_id,
                    title=_title_of(profile),
                    match_type=NEUTRAL,
                    company=profile.company if profile else None,
                ))

        if self.config.clustering == "connected_components":
            clusters = self._component_clusters(graph, user_id, peer_links)
        else:
            clusters = self._category_clusters(graph, user_id)

        nodes = [data for _, data in graph.nodes(data="data")]
        logger.debug(f"Graph for {user_id}: {len(nodes)} nodes, {len(edges)} edges, "
                     f"{len(clusters)} clusters")
        return NetworkGraphData(user_id=user_id, nodes=nodes, edges=edges, clusters=clusters)

    def _category_clusters(self, graph: nx.Graph, user_id: str) -> List[NetworkCluster]:
        members: Dict[CommonalityCategory, List[str]] = {c: [] for c in CATEGORY_ORDER}
        for node_id in graph.nodes:
            if node_id == user_id or graph.degree(node_id) == 0:
                continue
            categories = []
            for _, _, cats in graph.edges(node_id, data="categories"):
                categories.extend(cats)
            category = _majority(categories)
            if category is not None:
                members[category].append(node_id)
        return [
            _cluster(category, node_ids)
            for category, node_ids in members.items() if node_ids
        ]

    def _component_clusters(
        self,
        graph: nx.Graph,
        user_id: str,
        peer_links: Iterable[Tuple[str, str]]
    ) -> List[NetworkCluster]:
        matched = [n for n in graph.nodes if n != user_id and graph.degree(n) > 0]
        peers = nx.Graph()
        peers.add_nodes_from(matched)
        for a, b in peer_links:
            if peers.has_node(a) and peers.has_node(b):
                peers.add_edge(a, b)

        clusters = []
        components = sorted(nx.connected_components(peers), key=lambda c: (-len(c), min(c)))
        for component in components:
            categories = []
            for node_id in component:
                categories.extend(graph.edges[user_id, node_id]["categories"])
            theme = _majority(categories)
            if theme is None:
                # Nothing to name the component after, so it stays unclustered
                continue
            clusters.append(NetworkCluster(
                id=f"component-{len(clusters)}",
                name=CLUSTER_NAMES[theme],
                node_ids=sorted(component),
                theme=theme.value,
            ))
        return clusters


def _majority(categories: List[CommonalityCategory]) -> Optional[CommonalityCategory]:
    if not categories:
        return None
    counts = Counter(categories)
    # Ties go to the earlier category
    return max(CATEGORY_ORDER, key=lambda c: (counts.get(c, 0), -CATEGORY_ORDER.index(c)))


def _cluster(category: CommonalityCategory, node_ids: List[str]) -> NetworkCluster:
    return NetworkCluster(
        id=category.value,
        name=CLUSTER_NAMES[category],
        node_ids=list(node_ids),
        theme=category.value,
    )


def _title_of(profile: Optional[UserProfile]) -> str:
    if profile is None:
        return ""
    return profile.title or profile.position


def build_graph(
    user_id: str,
    matches: Iterable[Match],
    connections: Iterable[str] = (),
    profiles: Optional[Dict[str, UserProfile]] = None,
    peer_links: Iterable[Tuple[str, str]] = (),
    config: Optional[NetworkConfig] = None
) -> NetworkGraphData:
    """Convenience wrapper around NetworkGraphBuilder.build."""
    return NetworkGraphBuilder(config).build(user_id, matches, connections, profiles, peer_links)
