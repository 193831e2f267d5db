# supasupp/common/fallbacks.py
"""
Deterministic content used whenever an AI generation cannot be trusted.

Each accessor builds a fresh value on every call so callers may keep or
mutate what they receive without affecting later fallbacks.
"""
from typing import List

from supasupp.common.response_schema import FollowUpQuestion, Recommendation

_FALLBACK_QUESTIONS = [
    {
        "id": "fallback_1",
        "question": "Do you experience any changes in your energy levels throughout the day?",
        "type": "text",
    },
    {
        "id": "fallback_2",
        "question": "How would you rate your stress management techniques?",
        "type": "scale",
    },
    {
        "id": "fallback_3",
        "question": "What specific health areas are you most concerned about?",
        "type": "text",
    },
]

FALLBACK_HEALTH_ANALYSIS = """Based on your comprehensive health assessment, our AI has identified several key patterns in your health profile:

**Energy & Metabolic Health**: Your reported afternoon energy crashes combined with stress levels suggest potential issues with blood sugar regulation and adrenal function. The combination of moderate stress levels and suboptimal sleep quality creates a cycle that impacts your energy production at the cellular level.

**Nutritional Gaps**: Your dietary patterns and lifestyle factors indicate likely deficiencies in key nutrients, particularly vitamin D, magnesium, and B-vitamins. These deficiencies commonly occur together and compound each other's effects on energy and mood.

**Sleep & Recovery**: Your sleep quality assessment reveals opportunities for improvement in recovery and restoration. Poor sleep quality directly impacts hormone production, immune function, and cognitive performance.

**Digestive Health**: The digestive symptoms you mentioned suggest gut microbiome imbalance, which affects nutrient absorption and can contribute to systemic inflammation and immune dysfunction.

**Stress Response**: Your stress levels, combined with the other factors, indicate your body may be in a chronic state of low-level stress, depleting key nutrients and affecting your body's ability to recover and maintain optimal function."""

_FALLBACK_RECOMMENDATIONS = [
    {
        "id": 1,
        "name": "Vitamin D3",
        "dosage": "2000 IU daily",
        "priority": "high",
        "category": "Basic Essentials",
        "reason": "Based on your energy concerns and lifestyle, vitamin D deficiency is likely contributing to fatigue and mood issues.",
        "benefits": ["Energy support", "Immune function", "Mood regulation"],
        "timing": "Take with breakfast for better absorption",
    },
    {
        "id": 2,
        "name": "Magnesium Glycinate",
        "dosage": "400mg before bed",
        "priority": "high",
        "category": "Basic Essentials",
        "reason": "Your stress levels and sleep quality indicate magnesium deficiency, which affects both relaxation and energy production.",
        "benefits": ["Better sleep", "Stress reduction", "Muscle relaxation"],
        "timing": "Take 30 minutes before bedtime",
    },
    {
        "id": 3,
        "name": "Omega-3 EPA/DHA",
        "dosage": "1000mg daily",
        "priority": "medium",
        "category": "Basic Essentials",
        "reason": "Essential for brain health, inflammation reduction, and cardiovascular support based on your health goals.",
        "benefits": ["Brain function", "Heart health", "Anti-inflammatory"],
        "timing": "Take with meals to reduce fishy aftertaste",
    },
    {
        "id": 4,
        "name": "B-Complex",
        "dosage": "1 capsule daily",
        "priority": "medium",
        "category": "Advanced Support",
        "reason": "Your afternoon energy crashes suggest B-vitamin deficiencies, particularly B12 and folate.",
        "benefits": ["Energy metabolism", "Nervous system support", "Mental clarity"],
        "timing": "Take with breakfast for sustained energy",
    },
    {
        "id": 5,
        "name": "Probiotic Complex",
        "dosage": "10 billion CFU daily",
        "priority": "medium",
        "category": "Advanced Support",
        "reason": "Your digestive symptoms indicate gut microbiome imbalance affecting nutrient absorption and immunity.",
        "benefits": ["Digestive health", "Immune support", "Nutrient absorption"],
        "timing": "Take on empty stomach, 30 minutes before breakfast",
    },
]


def fallback_follow_up_questions() -> List[FollowUpQuestion]:
    return [FollowUpQuestion(**q) for q in _FALLBACK_QUESTIONS]


def fallback_health_analysis() -> str:
    return FALLBACK_HEALTH_ANALYSIS


def fallback_recommendations() -> List[Recommendation]:
    return [Recommendation(**rec) for rec in _FALLBACK_RECOMMENDATIONS]
