"""
Commonality extraction.

Test categories:
- Scalar, set and ranked comparison rules and their weights
- Normalization: case, whitespace, duplicates, custom interest folding
- Symmetry and ordering of the output
- Weight validation
"""

import math

import pytest

from matchmaking.commonality import check_weight, extract_commonalities, normalize_answers
from matchmaking.errors import ComputationError
from matchmaking.questionnaire import CATEGORY_ORDER, CommonalityCategory, QuestionnaireData, build_catalog

from conftest import make_answers


def _by_field(commonalities, name):
    return [c for c in commonalities if c.field == name]


class TestScalarFields:

    def test_shared_industry(self):
        a = QuestionnaireData(industry="technology")
        b = QuestionnaireData(industry="technology")
        [c] = extract_commonalities(a, b)
        assert c.category == CommonalityCategory.PROFESSIONAL
        assert c.description == "Both work in Technology"
        assert c.weight == pytest.approx(0.9)

    def test_case_and_whitespace_ignored(self):
        a = QuestionnaireData(industry="Technology")
        b = QuestionnaireData(industry="  technology ")
        [c] = extract_commonalities(a, b)
        assert c.description == "Both work in Technology"

    def test_different_values_do_not_match(self):
        a = QuestionnaireData(industry="technology")
        b = QuestionnaireData(industry="finance")
        assert extract_commonalities(a, b) == []

    def test_unanswered_on_one_side(self):
        a = QuestionnaireData(industry="technology")
        b = QuestionnaireData(industry="")
        assert extract_commonalities(a, b) == []


class TestSetFields:

    def test_weight_divided_by_union(self):
        a = QuestionnaireData(leadership_philosophy=["servant-leadership", "visionary"])
        b = QuestionnaireData(leadership_philosophy=["servant-leadership", "collaborative"])
        [c] = extract_commonalities(a, b)
        assert c.weight == pytest.approx(0.9 / 3)
        assert c.category == CommonalityCategory.VALUES
        assert c.description == "Share Servant Leadership leadership style"

    def test_one_commonality_per_shared_value(self):
        a = QuestionnaireData(growth_areas=["coaching", "public-speaking"])
        b = QuestionnaireData(growth_areas=["public-speaking", "coaching"])
        found = extract_commonalities(a, b)
        assert [c.value for c in found] == ["coaching", "public-speaking"]
        assert all(c.weight == pytest.approx(0.85 / 2) for c in found)

    def test_duplicate_answers_collapse(self):
        a = QuestionnaireData(energizers=["Mentoring", "mentoring"])
        b = QuestionnaireData(energizers=["mentoring"])
        [c] = extract_commonalities(a, b)
        assert c.weight == pytest.approx(0.75)


class TestRankedFields:

    def test_mutual_top_pick_keeps_full_weight(self):
        a = QuestionnaireData(relationship_values=["trust"])
        b = QuestionnaireData(relationship_values=["trust"])
        [c] = extract_commonalities(a, b)
        assert c.weight == pytest.approx(0.85)

    def test_rank_factor_applied(self):
        a = QuestionnaireData(relationship_values=["trust", "growth", "authenticity"])
        b = QuestionnaireData(relationship_values=["growth", "trust"])
        found = extract_commonalities(a, b)
        assert len(found) == 2
        expected = 0.85 / 3 * 2 / 3
        assert all(c.weight == pytest.approx(expected) for c in found)

    def test_lower_ranks_weigh_less(self):
        top = extract_commonalities(
            QuestionnaireData(relationship_values=["trust", "humor"]),
            QuestionnaireData(relationship_values=["trust", "loyalty"]),
        )
        low = extract_commonalities(
            QuestionnaireData(relationship_values=["humor", "trust"]),
            QuestionnaireData(relationship_values=["loyalty", "trust"]),
        )
        assert top[0].weight > low[0].weight

    def test_rank_scale_is_tunable(self):
        a = QuestionnaireData(relationship_values=["trust", "growth"])
        b = QuestionnaireData(relationship_values=["trust"])
        [c] = extract_commonalities(a, b, rank_scale=1.0)
        assert c.weight == pytest.approx(0.85 / 2 * 1 / 2)


class TestCustomInterests:

    def test_custom_interest_folds_into_recharge(self):
        a = QuestionnaireData(custom_interests=["Reading"])
        b = QuestionnaireData(recharge_activities=["reading"])
        [c] = extract_commonalities(a, b)
        assert c.field == "rechargeActivities"
        assert c.category == CommonalityCategory.HOBBY
        assert c.description == "Both enjoy Reading"

    def test_custom_interest_matching_label_folds(self):
        a = QuestionnaireData(custom_interests=["Outdoor Adventures"])
        b = QuestionnaireData(recharge_activities=["outdoors"])
        [c] = extract_commonalities(a, b)
        assert c.field == "rechargeActivities"

    def test_folded_interest_not_counted_twice(self):
        a = QuestionnaireData(recharge_activities=["reading"], custom_interests=["reading"])
        b = QuestionnaireData(recharge_activities=["reading"], custom_interests=["READING"])
        assert len(extract_commonalities(a, b)) == 1

    def test_free_text_custom_interests_compare_normalized(self):
        a = QuestionnaireData(custom_interests=["Rock Climbing"])
        b = QuestionnaireData(custom_interests=["rock climbing "])
        [c] = extract_commonalities(a, b)
        assert c.field == "customInterests"
        assert c.weight == pytest.approx(0.6)
        assert c.description == "Both enjoy Rock Climbing"

    def test_normalize_answers_moves_option(self):
        normalized = normalize_answers(QuestionnaireData(custom_interests=["Gaming", "chess"]))
        assert normalized["rechargeActivities"] == {"gaming": "gaming"}
        assert normalized["customInterests"] == {"chess": "chess"}


class TestSymmetryAndOrder:

    def test_scenario_industry_and_philosophy(self):
        a = QuestionnaireData(industry="technology", leadership_philosophy=["servant-leadership"])
        b = QuestionnaireData(industry="technology",
                              leadership_philosophy=["servant-leadership", "collaborative"])
        found = extract_commonalities(a, b)
        professional = [c for c in found if c.category == CommonalityCategory.PROFESSIONAL]
        values = [c for c in found if c.category == CommonalityCategory.VALUES]
        assert [c.description for c in professional] == ["Both work in Technology"]
        assert len(values) == 1

    def test_symmetric(self):
        a = make_answers("a", industry="Technology", growth_areas=["coaching", "strategy"],
                         relationship_values=["trust", "growth"], custom_interests=["Chess"])
        b = make_answers("b", industry="technology", growth_areas=["Strategy"],
                         relationship_values=["growth", "trust", "humor"], custom_interests=["chess"])
        assert extract_commonalities(a, b) == extract_commonalities(b, a)

    def test_no_shared_answers(self):
        assert extract_commonalities(make_answers("a"), make_answers("b")) == []

    def test_sorted_by_weight_then_category(self):
        a = make_answers("a", industry="tech", leadership_philosophy=["servant"],
                         energizers=["learning"], recharge_activities=["music"],
                         decision_making_style="intuitive")
        b = make_answers("b", industry="tech", leadership_philosophy=["servant"],
                         energizers=["learning"], recharge_activities=["music"],
                         decision_making_style="intuitive")
        found = extract_commonalities(a, b)
        keys = [(-c.weight, CATEGORY_ORDER.index(c.category)) for c in found]
        assert keys == sorted(keys)
        # industry and philosophy tie at 0.9: professional first
        assert [c.field for c in found[:2]] == ["industry", "leadershipPhilosophy"]

    def test_importance_override_changes_weight(self):
        a = QuestionnaireData(industry="tech")
        [c] = extract_commonalities(a, a, build_catalog({"industry": 0.4}))
        assert c.weight == pytest.approx(0.4)


class TestCheckWeight:

    @pytest.mark.parametrize("weight", [0.0, -0.1, 1.01, math.nan, math.inf])
    def test_rejects_out_of_range(self, weight):
        with pytest.raises(ComputationError):
            check_weight(weight, "industry")

    @pytest.mark.parametrize("weight", [1e-9, 0.5, 1.0])
    def test_accepts_in_range(self, weight):
        check_weight(weight)
