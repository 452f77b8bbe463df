"""
Network graph projection and insights.

Test categories:
- Nodes and edges: owner hub, passed matches, accepted connections
- Majority-category clustering and tie-breaking
- Connected-components clustering over peer links
- Insights: counts, averages, recommendation text
"""

import pytest

from matchmaking.models import Commonality, Match, MatchType, PublicUser, UserProfile, match_id_for
from matchmaking.network import (
    CLUSTER_NAMES,
    NetworkConfig,
    NetworkGraphBuilder,
    build_graph,
    compute_insights,
)
from matchmaking.network.insights import (
    BALANCED_RECOMMENDATION,
    DIVERSIFY_RECOMMENDATION,
    NO_CLUSTER,
    NO_COMMONALITY,
)
from matchmaking.questionnaire import CommonalityCategory

PRO = CommonalityCategory.PROFESSIONAL
VAL = CommonalityCategory.VALUES
LIF = CommonalityCategory.LIFESTYLE
HOB = CommonalityCategory.HOBBY


def _match(peer, categories, score=0.5, match_type=MatchType.STRATEGIC, passed=False, owner="me"):
    commonalities = tuple(
        Commonality(category, f"{category.value} {i}", 0.3) for i, category in enumerate(categories)
    )
    return Match(
        id=match_id_for(owner, peer),
        user_id=owner,
        matched_user_id=peer,
        matched_user=PublicUser(peer, UserProfile(name=peer.title(), title=f"{peer} title",
                                                  company="Acme")),
        type=match_type,
        commonalities=commonalities,
        conversation_starters=(),
        score=score,
        passed=passed,
    )


class TestNodesAndEdges:

    def test_owner_hub(self):
        graph = build_graph("me", [], profiles={"me": UserProfile(name="Me", position="CEO")})
        [node] = graph.nodes
        assert node.id == "me"
        assert node.name == "Me"
        assert node.title == "CEO"
        assert node.match_type == "neutral"
        assert graph.edges == []
        assert graph.clusters == []

    def test_peer_nodes_and_edges(self):
        graph = build_graph("me", [_match("ann", [PRO, VAL], 0.8, MatchType.HIGH_AFFINITY)])
        ann = graph.node("ann")
        assert ann.match_type == "high-affinity"
        assert ann.commonality_count == 2
        assert ann.company == "Acme"
        [edge] = graph.edges
        assert (edge.source, edge.target, edge.strength) == ("me", "ann", 0.8)
        assert edge.commonalities == ["professional 0", "values 1"]

    def test_passed_matches_excluded(self):
        graph = build_graph("me", [_match("ann", [PRO]), _match("bo", [HOB], passed=True)])
        assert graph.node("bo") is None
        assert len(graph.edges) == 1

    def test_foreign_matches_ignored(self):
        graph = build_graph("me", [_match("ann", [PRO], owner="other")])
        assert graph.node("ann") is None

    def test_connection_without_match_is_neutral_and_unclustered(self):
        graph = build_graph("me", [_match("ann", [PRO])], connections=["ann", "cy"],
                            profiles={"cy": UserProfile(name="Cy", title="CFO")})
        cy = graph.node("cy")
        assert cy.match_type == "neutral"
        assert cy.title == "CFO"
        assert graph.node("ann").match_type == "strategic"
        assert len(graph.edges) == 1
        assert all("cy" not in c.node_ids for c in graph.clusters)

    def test_connections_can_be_disabled(self):
        builder = NetworkGraphBuilder(NetworkConfig(include_connections=False))
        graph = builder.build("me", [], connections=["cy"])
        assert graph.node("cy") is None

    def test_to_dict(self):
        d = build_graph("me", [_match("ann", [PRO])]).to_dict()
        assert set(d) == {"userId", "nodes", "edges", "clusters", "generatedAt"}
        assert d["nodes"][1]["matchType"] == "strategic"
        assert d["clusters"][0] == {
            "id": "professional", "name": "Professional Peers", "nodeIds": ["ann"],
            "theme": "professional",
        }


class TestMajorityClustering:

    def test_majority_category(self):
        graph = build_graph("me", [
            _match("ann", [HOB, HOB, PRO]),
            _match("bo", [VAL]),
            _match("cy", [LIF, LIF]),
        ])
        clusters = {c.id: c.node_ids for c in graph.clusters}
        assert clusters == {"values": ["bo"], "lifestyle": ["cy"], "hobby": ["ann"]}

    def test_cluster_order_and_names(self):
        graph = build_graph("me", [_match("ann", [HOB]), _match("bo", [PRO])])
        assert [c.name for c in graph.clusters] == ["Professional Peers", "Shared Interests"]
        assert CLUSTER_NAMES[VAL] == "Shared Values"
        assert CLUSTER_NAMES[LIF] == "Lifestyle Allies"

    def test_tie_goes_to_earlier_category(self):
        graph = build_graph("me", [_match("ann", [HOB, VAL])])
        assert graph.clusters[0].id == "values"

    def test_match_without_commonalities_unclustered(self):
        graph = build_graph("me", [_match("ann", [])])
        assert graph.clusters == []

    def test_each_node_in_at_most_one_cluster(self):
        graph = build_graph("me", [
            _match(f"p{i}", [cat, PRO]) for i, cat in enumerate([PRO, VAL, LIF, HOB, VAL])
        ], connections=["x"])
        members = [n for c in graph.clusters for n in c.node_ids]
        assert len(members) == len(set(members)) == 5
        assert "me" not in members


class TestComponentClustering:

    @pytest.fixture
    def builder(self):
        return NetworkGraphBuilder(NetworkConfig(clustering="connected_components"))

    def test_components_from_peer_links(self, builder):
        matches = [_match("ann", [PRO]), _match("bo", [VAL, VAL]), _match("cy", [HOB])]
        graph = builder.build("me", matches, peer_links=[("ann", "bo"), ("cy", "outsider")])
        assert [(c.node_ids, c.theme) for c in graph.clusters] == [
            (["ann", "bo"], "values"),
            (["cy"], "hobby"),
        ]
        assert graph.clusters[0].name == "Shared Values"

    def test_without_links_every_peer_is_own_cluster(self, builder):
        graph = builder.build("me", [_match("ann", [PRO]), _match("bo", [HOB])])
        assert len(graph.clusters) == 2

    def test_component_without_commonalities_unclustered(self, builder):
        graph = builder.build("me", [_match("ann", []), _match("bo", [VAL])])
        assert [(c.id, c.node_ids, c.theme) for c in graph.clusters] == [
            ("component-0", ["bo"], "values"),
        ]
        assert graph.node("ann") is not None

    def test_invalid_strategy(self):
        with pytest.raises(ValueError):
            NetworkGraphBuilder(NetworkConfig(clustering="louvain"))


class TestInsights:

    def test_empty_graph(self):
        insights = compute_insights(build_graph("me", []))
        assert insights.total_connections == 0
        assert insights.average_strength == 0
        assert insights.strongest_cluster == NO_CLUSTER
        assert insights.top_commonality == NO_COMMONALITY
        assert insights.recommendation == BALANCED_RECOMMENDATION

    def test_counts_and_average(self):
        graph = build_graph("me", [
            _match("ann", [PRO, VAL], 0.9, MatchType.HIGH_AFFINITY),
            _match("bo", [PRO, VAL], 0.7, MatchType.HIGH_AFFINITY),
            _match("cy", [HOB], 0.4, MatchType.STRATEGIC),
        ])
        insights = compute_insights(graph)
        assert insights.total_connections == 3
        assert insights.high_affinity_count == 2
        assert insights.strategic_count == 1
        assert insights.average_strength == 67
        assert insights.strongest_cluster == "Professional Peers"
        assert insights.top_commonality == "professional 0"
        assert insights.recommendation == DIVERSIFY_RECOMMENDATION

    def test_to_dict(self):
        d = compute_insights(build_graph("me", [])).to_dict()
        assert set(d) == {
            "totalConnections", "highAffinityCount", "strategicCount", "averageStrength",
            "strongestCluster", "topCommonality", "recommendation",
        }
