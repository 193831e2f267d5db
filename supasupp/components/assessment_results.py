# supasupp/components/assessment_results.py
"""
Results stage: runs the analysis and recommendation generations together and
shapes their output for the results view.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from supasupp.common.logger import get_logger
from supasupp.components.ai_orchestrator import Advisory, AIOrchestrator
from supasupp.components.answer_store import AnswerValue
from supasupp.components.recommendation_classifier import ClassifiedRecommendations, classify

logger = get_logger(__name__)

PRIORITY_COLORS = {
    "high": "red",
    "medium": "yellow",
    "low": "green",
}

USAGE_GUIDANCE = [
    "Start with high-priority supplements first",
    "Add medium-priority supplements gradually",
    "Consult with your healthcare provider before starting any new supplement regimen",
]


@dataclass
class AssessmentResults:
    answers: Dict[str, AnswerValue]
    health_analysis: str
    recommendations: ClassifiedRecommendations
    advisories: List[Advisory] = field(default_factory=list)

    @property
    def used_fallback(self) -> bool:
        return bool(self.advisories)

    def to_dict(self) -> Dict[str, Any]:
        def _render(items):
            return [
                {**item.to_dict(), "priority_color": PRIORITY_COLORS[item.recommendation.priority]}
                for item in items
            ]

        return {
            "answers": self.answers,
            "health_analysis": self.health_analysis,
            "recommendations": _render(self.recommendations.all),
            "high_priority": _render(self.recommendations.high_priority),
            "medium_priority": _render(self.recommendations.medium_priority),
            "total": self.recommendations.total,
            "usage_guidance": USAGE_GUIDANCE,
            "advisories": [advisory.to_dict() for advisory in self.advisories],
        }


def build_assessment_results(orchestrator: AIOrchestrator, answers: Dict[str, AnswerValue]) -> AssessmentResults:
    analysis, recommendations = orchestrator.generate_results(answers)

    # One advisory per distinct condition so the user is not told the same thing twice
    advisories: List[Advisory] = []
    for result in (analysis, recommendations):
        if result.advisory and all(a.kind != result.advisory.kind for a in advisories):
            advisories.append(result.advisory)

    classified = classify(recommendations.value)
    logger.info(
        f"Results ready: {classified.total} recommendations "
        f"({len(classified.high_priority)} high, {len(classified.medium_priority)} medium), "
        f"advisories={[a.kind for a in advisories]}"
    )
    return AssessmentResults(
        answers=dict(answers),
        health_analysis=analysis.value,
        recommendations=classified,
        advisories=advisories,
    )
