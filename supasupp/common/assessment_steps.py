# supasupp/common/assessment_steps.py
"""
Fixed step list for the health assessment wizard and the field specs used to
validate answers at write time.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class FieldSpec:
    name: str
    type: str  # "number","select","checkbox","scale","text"
    required: bool = False
    options: Optional[List[str]] = None
    min: Optional[float] = None
    max: Optional[float] = None
    hint: Optional[str] = None


@dataclass(frozen=True)
class WizardStep:
    title: str
    description: str
    is_ai_step: bool = False
    fields: List[FieldSpec] = field(default_factory=list)


HEALTH_GOALS = [
    "Improve energy levels",
    "Better sleep quality",
    "Weight management",
    "Immune system support",
    "Mental clarity & focus",
    "Stress management",
    "Heart health",
    "Digestive health",
    "Joint & bone health",
    "Skin health",
    "Athletic performance",
    "General wellness",
]

DIGESTIVE_ISSUES = [
    "Bloating",
    "Gas",
    "Constipation",
    "Diarrhea",
    "Acid reflux",
    "Food sensitivities",
    "None",
]

ASSESSMENT_STEPS: List[WizardStep] = [
    WizardStep(
        title="Basic Information",
        description="Let's start with some basic details about you",
        fields=[
            FieldSpec("age", "number", True, min=0, max=120, hint="Age in years"),
            FieldSpec("gender", "select", True, options=["male", "female", "other", "prefer-not-to-say"]),
            FieldSpec("height", "number", False, min=30, max=250, hint="Height in cm"),
            FieldSpec("weight", "number", False, min=2, max=400, hint="Weight in kg"),
            FieldSpec("activity_level", "select", False,
                      options=["sedentary", "light", "moderate", "high", "very-high"]),
        ],
    ),
    WizardStep(
        title="Health Goals",
        description="What are your primary health objectives?",
        fields=[
            FieldSpec("health_goals", "checkbox", True, options=HEALTH_GOALS),
            FieldSpec("specific_concerns", "text", False),
        ],
    ),
    WizardStep(
        title="Current Health Status",
        description="Tell us about your current health situation",
        fields=[
            FieldSpec("medical_conditions", "text", False),
            FieldSpec("medications", "text", False),
            FieldSpec("energy_level", "scale", False),
            FieldSpec("sleep_quality", "select", False, options=["poor", "fair", "good", "excellent"]),
        ],
    ),
    WizardStep(
        title="Lifestyle & Diet",
        description="Understanding your daily habits and nutrition",
        fields=[
            FieldSpec("diet_type", "select", False,
                      options=["omnivore", "vegetarian", "vegan", "keto", "paleo", "mediterranean", "other"]),
            FieldSpec("stress_level", "scale", False),
            FieldSpec("water_intake", "select", False,
                      options=["less-than-4", "4-6", "6-8", "more-than-8"]),
            FieldSpec("digestive_issues", "checkbox", False, options=DIGESTIVE_ISSUES),
        ],
    ),
    WizardStep(
        title="AI Follow-up Questions",
        description="Personalized questions based on your responses",
        is_ai_step=True,
    ),
]


def ai_step_index(steps: List[WizardStep]) -> int:
    """Index of the single AI step; raises ValueError when the list breaks the step invariants."""
    indexes = [i for i, step in enumerate(steps) if step.is_ai_step]
    if len(steps) < 2:
        raise ValueError("a wizard needs at least two steps")
    if len(indexes) != 1:
        raise ValueError(f"expected exactly one AI step, found {len(indexes)}")
    if indexes[0] == 0:
        raise ValueError("the AI step cannot be the first step")
    return indexes[0]


def field_index(steps: List[WizardStep]) -> Dict[str, FieldSpec]:
    return {spec.name: spec for step in steps for spec in step.fields}
