"""Friend-of-friend recommendations.

Builds a directed friend graph around the subject with NetworkX: an edge
``u -> v`` means ``v`` is in ``u``'s friend list. Friend lists are kept
symmetric, but edges are directed so that a candidate's mutual friend count
is taken from the candidate's own list, as defined:

    F          = subject's friends
    candidates = (union of each friend's friends) - F - {subject}
    mutual(c)  = |F & friends(c)|

Candidates are deduplicated by identity, ranked by mutual count descending
and then by account id, and only then paginated. Each call re-ranks the full
candidate set; pages from separate calls can shift if the graph changes in
between.
"""

from __future__ import annotations

import logging

import networkx as nx

from .data.interfaces import RelationshipStore
from .models import Recommendation

logger = logging.getLogger(__name__)


class RecommendationEngine:
    """Ranks friends of friends by the number of friends shared with the subject."""

    def __init__(self, relationships: RelationshipStore) -> None:
        self.relationships = relationships

    async def build_graph(self, subject_id: str) -> nx.DiGraph:
        """Load the two-hop neighbourhood of subject into a directed graph."""
        graph = nx.DiGraph()
        graph.add_node(subject_id, role="subject")

        friends = await self.relationships.get_friend_ids(subject_id)
        graph.add_edges_from((subject_id, friend_id) for friend_id in friends if friend_id != subject_id)
        if not friends:
            return graph

        friend_sets = await self.relationships.get_friend_sets(friends)
        candidates: set[str] = set()
        for friend_id, friend_friends in friend_sets.items():
            graph.add_edges_from((friend_id, other_id) for other_id in friend_friends if other_id != friend_id)
            candidates.update(friend_friends)
        candidates -= friends
        candidates.discard(subject_id)

        if candidates:
            candidate_sets = await self.relationships.get_friend_sets(candidates)
            for candidate_id in candidates:
                graph.add_node(candidate_id, role="candidate")
                graph.add_edges_from(
                    (candidate_id, other_id)
                    for other_id in candidate_sets.get(candidate_id, set())
                    if other_id in friends
                )

        logger.debug(
            f"Recommendation graph for {subject_id}: {graph.number_of_nodes()} nodes, "
            f"{graph.number_of_edges()} edges, {len(candidates)} candidates"
        )
        return graph

    def rank(self, graph: nx.DiGraph, subject_id: str) -> list[Recommendation]:
        """Rank every candidate in the graph, most mutual friends first."""
        friends = set(graph.successors(subject_id))
        candidates = {n for n, role in graph.nodes(data="role") if role == "candidate"}
        ranked = [
            Recommendation(account_id=candidate_id, mutual_friends=len(friends & set(graph.successors(candidate_id))))
            for candidate_id in candidates
        ]
        ranked.sort(key=lambda r: (-r.mutual_friends, r.account_id))
        return ranked

    async def recommend(self, subject_id: str, offset: int = 0, limit: int = 10) -> list[Recommendation]:
        """Return one page of ranked recommendations for subject."""
        offset = max(offset, 0)
        if limit <= 0:
            return []
        graph = await self.build_graph(subject_id)
        ranked = self.rank(graph, subject_id)
        return ranked[offset : offset + limit]
