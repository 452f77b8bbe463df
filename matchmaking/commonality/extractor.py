"""
Commonality extraction between two questionnaire records.

This module compares Person A and Person B field by field and emits one
Commonality per shared answer.

Comparison Rules:
- Scalar: exact match on the normalized answer -> weight = importance.
  Scalar answers come from closed vocabularies, so normalization (trim and
  case-fold) only removes formatting noise; it is applied deliberately to
  every field, not just custom interests
- Set: each shared element -> weight = importance / |A ∪ B|
  (rarer shared values score higher than generic overlap)
- Ranked: set weight scaled by RANK_SCALE / (rank_a + rank_b). With the
  default scale of 2 a mutual top pick keeps the full weight and a mutual
  third pick keeps a third of it
- Custom interests: normalized, and folded into the predefined recharge
  activities when they name one of its options

Output Order:
    weight desc -> category (professional, values, lifestyle, hobby)
    -> discovery order (catalog order, then sorted shared values)
"""

import logging
import math
from typing import Dict, List, Optional, Tuple

from ..errors import ComputationError
from ..models import Commonality
from ..questionnaire.catalog import (
    FIELD_CATALOG,
    RANK_SCALE,
    QuestionField,
    format_value,
    match_recharge_option,
    normalize_answer,
)
from ..questionnaire.schema import CATEGORY_ORDER, FieldKind, QuestionnaireData

logger = logging.getLogger(__name__)

# Normalized answers for one field: comparison key -> display value, in answer order
Answers = Dict[str, str]


def extract_commonalities(
    answers_a: QuestionnaireData,
    answers_b: QuestionnaireData,
    catalog: Tuple[QuestionField, ...] = FIELD_CATALOG,
    rank_scale: float = RANK_SCALE
) -> List[Commonality]:
    """
    Compute the commonalities shared by two questionnaire records.

    Fields left unanswered by either party never produce a commonality, and
    each (field, value) produces at most one.

    Args:
        answers_a: Questionnaire answers for Person A
        answers_b: Questionnaire answers for Person B
        catalog: Field definitions (defaults to the built-in catalog)
        rank_scale: Numerator of the ranked-field factor

    Returns:
        Commonalities sorted by weight, category and discovery order

    Raises:
        ComputationError: If a computed weight falls outside (0, 1]
    """
    normalized_a = normalize_answers(answers_a, catalog)
    normalized_b = normalize_answers(answers_b, catalog)

    found: List[Tuple[Commonality, int]] = []
    for f in catalog:
        field_a = normalized_a.get(f.name)
        field_b = normalized_b.get(f.name)
        if not field_a or not field_b:
            continue

        if f.kind == FieldKind.SCALAR:
            shared = _compare_scalar(f, field_a, field_b)
        else:
            shared = _compare_set(f, field_a, field_b, rank_scale)

        for commonality in shared:
            found.append((commonality, len(found)))

    found.sort(key=lambda item: (
        -item[0].weight,
        CATEGORY_ORDER.index(item[0].category),
        item[1],
    ))
    return [c for c, _ in found]


def normalize_answers(
    answers: QuestionnaireData,
    catalog: Tuple[QuestionField, ...] = FIELD_CATALOG
) -> Dict[str, Answers]:
    """
    Normalize one questionnaire into comparison keys per field.

    Custom interests matching a predefined recharge option are moved into
    ``rechargeActivities`` so the same activity never appears twice.

    Args:
        answers: Questionnaire answers for one person
        catalog: Field definitions

    Returns:
        Mapping of field name to ordered {key: display value}; unanswered
        fields are omitted
    """
    result: Dict[str, Answers] = {}
    for f in catalog:
        if not answers.is_answered(f.name):
            continue
        raw = answers.get(f.name)
        values = [raw] if isinstance(raw, str) else raw
        normalized: Answers = {}
        for value in values:
            key = normalize_answer(value)
            if key and key not in normalized:
                normalized[key] = value.strip()
        result[f.name] = normalized

    custom = result.pop("customInterests", None)
    if custom:
        recharge = result.setdefault("rechargeActivities", {})
        remaining: Answers = {}
        for key, value in custom.items():
            option = match_recharge_option(value)
            if option is not None:
                recharge.setdefault(option, option)
            else:
                remaining[key] = value
        if not recharge:
            del result["rechargeActivities"]
        if remaining:
            result["customInterests"] = remaining

    # Only keep fields the catalog actually declares
    declared = {f.name for f in catalog}
    return {name: values for name, values in result.items() if name in declared}


def _compare_scalar(f: QuestionField, answers_a: Answers, answers_b: Answers) -> List[Commonality]:
    (key_a, value_a), = answers_a.items()
    (key_b, value_b), = answers_b.items()
    if key_a != key_b:
        return []
    return [_build(f, min(value_a, value_b), f.importance)]


def _compare_set(
    f: QuestionField,
    answers_a: Answers,
    answers_b: Answers,
    rank_scale: float = RANK_SCALE
) -> List[Commonality]:
    keys_a = list(answers_a)
    keys_b = list(answers_b)
    shared = set(keys_a) & set(keys_b)
    if not shared:
        return []

    union_size = len(set(keys_a) | set(keys_b))
    base_weight = f.importance / union_size

    commonalities = []
    for key in sorted(shared):
        weight = base_weight
        if f.kind == FieldKind.RANKED:
            rank_a = keys_a.index(key) + 1
            rank_b = keys_b.index(key) + 1
            weight *= rank_scale / (rank_a + rank_b)
        display = min(answers_a[key], answers_b[key])
        commonalities.append(_build(f, display, weight))
    return commonalities


def _build(f: QuestionField, value: str, weight: float) -> Commonality:
    check_weight(weight, f.name)
    return Commonality(
        category=f.category,
        description=f.template.format(value=format_value(value)),
        weight=weight,
        field=f.name,
        value=value,
    )


def check_weight(weight: float, source: Optional[str] = None) -> None:
    """
    Validate that a weight lies in (0, 1].

    Raises:
        ComputationError: If the weight is non-finite or out of range
    """
    if not isinstance(weight, (int, float)) or not math.isfinite(weight) or not 0 < weight <= 1:
        where = f" for {source}" if source else ""
        raise ComputationError(f"Commonality weight{where} must be in (0, 1], got {weight!r}")
