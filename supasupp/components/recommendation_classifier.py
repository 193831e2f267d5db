# supasupp/components/recommendation_classifier.py
"""
Display classification for supplement recommendations.

The tag/icon is derived from the supplement name on every call and is kept
beside the Recommendation, never inside it, so it cannot change a
recommendation's equality or its serialized shape.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from supasupp.common.response_schema import Recommendation

TAG_VITAMIN = "vitamin"
TAG_MAGNESIUM = "magnesium"
TAG_OMEGA = "omega"
TAG_B_COMPLEX = "b-complex"
TAG_PROBIOTIC = "probiotic"
TAG_DEFAULT = "default"

# First match wins
TAG_RULES: List[Tuple[str, Tuple[str, ...]]] = [
    (TAG_VITAMIN, ("vitamin",)),
    (TAG_MAGNESIUM, ("magnesium",)),
    (TAG_OMEGA, ("omega",)),
    (TAG_B_COMPLEX, ("b-complex", "b complex")),
    (TAG_PROBIOTIC, ("probiotic",)),
]

TAG_ICONS: Dict[str, str] = {
    TAG_VITAMIN: "star",
    TAG_MAGNESIUM: "clock",
    TAG_OMEGA: "heart",
    TAG_B_COMPLEX: "trending-up",
    TAG_PROBIOTIC: "shield",
    TAG_DEFAULT: "star",
}


def classify_name(name: str) -> str:
    lowered = (name or "").lower()
    for tag, needles in TAG_RULES:
        if any(needle in lowered for needle in needles):
            return tag
    return TAG_DEFAULT


@dataclass(frozen=True)
class DisplayRecommendation:
    recommendation: Recommendation
    tag: str
    icon: str

    @classmethod
    def from_recommendation(cls, recommendation: Recommendation) -> "DisplayRecommendation":
        tag = classify_name(recommendation.name)
        return cls(recommendation=recommendation, tag=tag, icon=TAG_ICONS[tag])

    def to_dict(self) -> Dict[str, Any]:
        return {**self.recommendation.model_dump(), "tag": self.tag, "icon": self.icon}


@dataclass(frozen=True)
class ClassifiedRecommendations:
    all: List[DisplayRecommendation] = field(default_factory=list)
    high_priority: List[DisplayRecommendation] = field(default_factory=list)
    medium_priority: List[DisplayRecommendation] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.all)


def classify(recommendations: List[Recommendation]) -> ClassifiedRecommendations:
    """Tag every recommendation and split out the high and medium views, keeping input order."""
    tagged = [DisplayRecommendation.from_recommendation(rec) for rec in recommendations]
    return ClassifiedRecommendations(
        all=tagged,
        high_priority=[item for item in tagged if item.recommendation.priority == "high"],
        medium_priority=[item for item in tagged if item.recommendation.priority == "medium"],
    )
