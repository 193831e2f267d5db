# supasupp/common/templates.py
"""
Prompt templates for the three AI generations.
- build_prompt(kind, answers) embeds the answer snapshot as pretty-printed JSON.
- JSON-producing templates demand a bare array so the reply can be validated as-is.
"""
import json
from typing import Any, Dict

TEMPLATES: Dict[str, str] = {
    "follow_up_questions": """You are a health assessment AI that generates personalized follow-up questions based on user health data.

Based on these answers from a health assessment:
{answers}

Generate exactly 3 relevant follow-up questions that would help understand this person's health needs better.

For each question, provide:
1. A clear question text
2. The appropriate question type (one of: "text", "select", "checkbox", "scale")
3. If the type is "select" or "checkbox", provide relevant options

Format your response as valid JSON that matches this TypeScript type:
type FollowUpQuestion = {{
  id: string; // Generate a unique string ID
  question: string;
  type: "text" | "select" | "checkbox" | "scale";
  options?: string[]; // Include only for select and checkbox types
}}[];

Return ONLY the JSON array with no additional text or explanation.
""",
    "health_analysis": """You are a health analysis AI that identifies potential root causes of health issues.

Based on this health assessment data:
{answers}

Provide a comprehensive health analysis that identifies patterns and potential root causes of health issues.
Format the response in markdown with sections for different health aspects (Energy & Metabolic Health, Nutritional Gaps, Sleep & Recovery, Digestive Health, Stress Response).
Be specific and insightful, focusing on connecting the user's symptoms and lifestyle factors with potential underlying issues.

Return the analysis as a detailed markdown text with no additional wrapper text.
""",
    "recommendations": """You are a health supplement recommendation AI that provides evidence-based supplement suggestions.

Based on this health assessment data:
{answers}

Generate personalized supplement recommendations with the following information for each:
- name: The name of the supplement (e.g., "Vitamin D3")
- dosage: Recommended dosage (e.g., "2000 IU daily")
- priority: Priority level ("high", "medium", or "low")
- category: Category (e.g., "Basic Essentials" or "Advanced Support")
- reason: A detailed explanation of why this supplement is recommended based on their assessment data
- benefits: An array of 3 key benefits (e.g., ["Energy support", "Immune function", "Mood regulation"])
- timing: Best time to take the supplement (e.g., "Take with breakfast for better absorption")

Provide at least 5 recommendations, with at least 2 high priority ones.

Format your response as valid JSON that matches this TypeScript type:
type Recommendation = {{
  id: number;
  name: string;
  dosage: string;
  priority: "high" | "medium" | "low";
  category: string;
  reason: string;
  benefits: string[];
  timing: string;
}}[];

Return ONLY the JSON array with no additional text or explanation.
""",
}


def serialize_answers(answers: Dict[str, Any]) -> str:
    return json.dumps(answers or {}, indent=2, ensure_ascii=False)


def build_prompt(kind: str, answers: Dict[str, Any]) -> str:
    if kind not in TEMPLATES:
        raise KeyError(f"Unknown prompt template '{kind}'")
    return TEMPLATES[kind].format(answers=serialize_answers(answers))
