"""
Business rules mapping review sentiment to a customer action.

The sentiment is first folded onto a single 0 (worst) to 1 (best) scale and
then bucketed:

    score <= 0.4        -> OFFER_COUPON
    0.4 < score < 0.7   -> REQUEST_FEEDBACK
    score >= 0.7        -> ASK_REFERRAL
"""

from typing import Dict, Tuple, Union

from review_pulse.services.sentiment.models import (
    ActionCode,
    ActionDecision,
    SentimentLabel,
    SentimentResult,
    clamp_confidence,
)

COUPON_MAX_SCORE = 0.4
REFERRAL_MIN_SCORE = 0.7

# action -> (message, color hint)
ACTION_PRESENTATION: Dict[ActionCode, Tuple[str, str]] = {
    ActionCode.OFFER_COUPON: (
        "We are truly sorry. Please accept this 50% discount coupon.",
        "#ef4444",
    ),
    ActionCode.REQUEST_FEEDBACK: (
        "Thank you! Could you tell us how we can improve?",
        "#6b7280",
    ),
    ActionCode.ASK_REFERRAL: (
        "Glad you liked it! Refer a friend and earn rewards.",
        "#3b82f6",
    ),
}


def normalized_score(label: Union[SentimentLabel, str], confidence: float) -> float:
    """Map a label and its confidence onto the 0..1 satisfaction scale."""
    try:
        label = SentimentLabel(str(getattr(label, "value", label)).upper())
    except ValueError:
        label = SentimentLabel.NEUTRAL
    confidence = clamp_confidence(confidence)

    if label == SentimentLabel.POSITIVE:
        return confidence
    if label == SentimentLabel.NEGATIVE:
        return 1.0 - confidence
    return 0.5


def action_for_score(score: float) -> ActionCode:
    if score <= COUPON_MAX_SCORE:
        return ActionCode.OFFER_COUPON
    if score < REFERRAL_MIN_SCORE:
        return ActionCode.REQUEST_FEEDBACK
    return ActionCode.ASK_REFERRAL


def decide(label: Union[SentimentLabel, str], confidence: float) -> ActionDecision:
    """
    Decide the business action for a sentiment.

    Args:
        label: POSITIVE, NEGATIVE or NEUTRAL (unknown labels count as NEUTRAL)
        confidence: Classifier confidence, clamped to [0, 1]

    Returns:
        ActionDecision with the action code, customer message, UI color and
        the normalized score the decision was based on
    """
    score = normalized_score(label, confidence)
    action = action_for_score(score)
    message, color = ACTION_PRESENTATION[action]
    return ActionDecision(action_code=action, message=message, color_hint=color, score=score)


def decide_for_result(result: SentimentResult) -> ActionDecision:
    return decide(result.label, result.confidence)
