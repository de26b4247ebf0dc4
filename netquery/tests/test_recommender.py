"""
Tests for the Recommender

Rule order, thresholds, clustering and decision-maker detection.
"""

import pytest


def _conn(name, company="Acme", position="Engineer", score=0.5):
    from netquery.retriever.ranker import RankedConnection

    return RankedConnection(
        name=name,
        company=company,
        position=position,
        email="",
        linkedin_url="",
        relevance_score=score,
    )


def _types(recommendations):
    return [r.type.value for r in recommendations]


class TestRecommender:
    """Tests for Recommender.recommend"""

    @pytest.fixture
    def recommender(self):
        from netquery.retriever.recommender import Recommender
        return Recommender()

    def test_empty_yields_only_no_connections(self, recommender):
        from netquery.retriever.recommender import RecommendationType, Priority

        recs = recommender.recommend([])

        assert len(recs) == 1
        assert recs[0].type == RecommendationType.NO_CONNECTIONS
        assert recs[0].priority == Priority.LOW

    def test_nothing_applicable(self, recommender):
        recs = recommender.recommend([_conn("A", company="X"), _conn("B", company="Y")])

        assert recs == []

    def test_warm_introduction_single_above_threshold(self, recommender):
        from netquery.retriever.recommender import Priority

        recs = recommender.recommend([
            _conn("Close Contact", company="X", score=0.71),
            _conn("Other", company="Y", score=0.7),
            _conn("Third", company="Z", score=0.3),
        ])

        warm = [r for r in recs if r.type.value == "warm_introduction"]
        assert len(warm) == 1
        assert warm[0].payload["connections"] == ["Close Contact"]
        assert warm[0].payload["connection_count"] == 1
        assert warm[0].priority == Priority.HIGH

    def test_threshold_is_strict(self, recommender):
        recs = recommender.recommend([_conn("Edge", score=0.7)])

        assert "warm_introduction" not in _types(recs)

    def test_warm_introduction_lists_up_to_three(self, recommender):
        connections = [_conn(f"P{i}", company=f"Co{i}", score=0.9) for i in range(5)]
        warm = recommender.recommend(connections)[0]

        assert warm.payload["connections"] == ["P0", "P1", "P2"]
        assert warm.payload["connection_count"] == 5
        assert warm.message.startswith("5 high-relevance connections found.")

    def test_company_cluster_largest_group(self, recommender):
        from netquery.retriever.recommender import Priority

        connections = [
            _conn("A", company="Acme"),
            _conn("B", company="Globex"),
            _conn("C", company="Acme"),
            _conn("D", company="Acme"),
        ]
        recs = recommender.recommend(connections)

        cluster = [r for r in recs if r.type.value == "company_cluster"]
        assert len(cluster) == 1
        assert cluster[0].payload == {"company": "Acme", "connection_count": 3}
        assert cluster[0].priority == Priority.MEDIUM
        assert "Acme (3 connections)" in cluster[0].message

    def test_company_cluster_tie_first_encountered(self, recommender):
        connections = [
            _conn("A", company="Initech"),
            _conn("B", company="Globex"),
            _conn("C", company="Globex"),
            _conn("D", company="Initech"),
        ]
        recs = recommender.recommend(connections)

        cluster = next(r for r in recs if r.type.value == "company_cluster")
        assert cluster.payload["company"] == "Initech"

    def test_company_cluster_exact_match(self, recommender):
        recs = recommender.recommend([_conn("A", company="Acme"), _conn("B", company="ACME")])

        assert "company_cluster" not in _types(recs)

    @pytest.mark.parametrize("position", [
        "VP of Sales", "Chief Executive Officer (CEO)", "cto", "Director, Engineering",
        "Head of Growth", "SVP Marketing",
    ])
    def test_decision_maker_positions(self, recommender, position):
        recs = recommender.recommend([_conn("Boss", position=position)])

        makers = next(r for r in recs if r.type.value == "decision_makers")
        assert makers.payload["decision_makers"] == [
            {"name": "Boss", "position": position, "company": "Acme"}
        ]

    def test_decision_makers_capped_with_total(self, recommender):
        connections = [_conn(f"P{i}", company=f"Co{i}", position="Director") for i in range(4)]
        recs = recommender.recommend(connections)

        makers = next(r for r in recs if r.type.value == "decision_makers")
        assert len(makers.payload["decision_makers"]) == 3
        assert makers.payload["decision_maker_count"] == 4
        assert makers.message == "4 potential decision makers identified in your network."

    def test_non_decision_maker(self, recommender):
        recs = recommender.recommend([_conn("A", position="Software Engineer")])

        assert "decision_makers" not in _types(recs)

    def test_rules_emitted_in_evaluation_order(self, recommender):
        connections = [
            _conn("A", company="Acme", position="CEO", score=0.95),
            _conn("B", company="Acme", position="Engineer", score=0.4),
        ]
        recs = recommender.recommend(connections)

        assert _types(recs) == ["warm_introduction", "company_cluster", "decision_makers"]

    def test_custom_policy(self):
        from netquery.retriever.recommender import Recommender

        recommender = Recommender(
            warm_intro_threshold=0.5,
            sample_size=1,
            decision_maker_keywords=["Founder"],
        )
        recs = recommender.recommend([
            _conn("A", company="X", position="Co-founder", score=0.6),
            _conn("B", company="Y", position="CEO", score=0.6),
        ])

        assert _types(recs) == ["warm_introduction", "decision_makers"]
        assert recs[0].payload["connections"] == ["A"]
        assert recs[1].payload["decision_maker_count"] == 1


class TestRecommendationToDict:
    def test_payload_flattened(self):
        from netquery.retriever.recommender import Recommendation, RecommendationType, Priority

        rec = Recommendation(
            type=RecommendationType.COMPANY_CLUSTER,
            message="m",
            priority=Priority.MEDIUM,
            payload={"company": "Acme", "connection_count": 2},
        )

        assert rec.to_dict() == {
            "type": "company_cluster",
            "message": "m",
            "priority": "medium",
            "company": "Acme",
            "connection_count": 2,
        }
