"""
Intent Catalogue

Each generated intent category has a target count, an instruction
template, and the profile fields its prompt is allowed to surface.
Keeping prompts to their allow-list keeps each cluster focused.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from .models import IntentCategory


@dataclass
class IntentConfig:
    """Generation settings for one intent category."""
    count: int
    instruction: str
    profile_fields: List[str] = field(default_factory=list)


INTENT_CONFIGS: Dict[IntentCategory, IntentConfig] = {
    IntentCategory.DIRECT_RECOMMENDATION: IntentConfig(
        count=15,
        profile_fields=["core_problem", "target_buyer", "target_audience"],
        instruction="""Generate queries where a user matching the TARGET BUYER profile asks an AI assistant to recommend a tool for the CORE PROBLEM.

Vary the queries across these patterns:
- "[target buyer role] asking for a tool to solve [problem]"
- "Recommend a [category] for [target buyer context]"
- "What's the best [category] for [specific aspect of problem]"

Each query MUST reference either the target buyer context OR the core problem. Generic queries like "best [category] tool" are NOT acceptable.""",
    ),
    IntentCategory.ALTERNATIVES: IntentConfig(
        count=12,
        profile_fields=["competitors", "target_buyer"],
        instruction="""Generate queries where the TARGET BUYER looks for alternatives to known competitors.

Vary:
- "What are alternatives to [competitor] for [buyer context]?"
- "Tools like [competitor] but [differentiator-adjacent need]"
- "[competitor] alternative for [specific buyer segment]"

Use ONLY competitors from the context. Never the target brand.""",
    ),
    IntentCategory.COMPARISON: IntentConfig(
        count=12,
        profile_fields=["competitors", "key_differentiators"],
        instruction="""Generate queries comparing tools in this category, especially around differentiator themes.

Vary:
- "Compare [comp1] vs [comp2] for [differentiator area]"
- "Which [category] tool is best for [specific differentiator]?"
- "Top [category] tools with [feature from differentiators]"

Use ONLY competitors from the context for named comparisons.""",
    ),
    IntentCategory.PROBLEM_BASED: IntentConfig(
        count=15,
        profile_fields=["core_problem", "target_buyer", "use_cases"],
        instruction="""Generate queries where the TARGET BUYER describes the CORE PROBLEM in their own words, as if talking to an AI assistant.

These must sound like a real person struggling with the problem, NOT someone shopping for a tool category.

Good: "My team spends 3 hours every Monday just figuring out who's available when"
Bad:  "What scheduling software should I use?"

Vary the problem expression:
- Describe the pain without naming the category
- Express frustration with the current manual process
- Ask for help with a specific scenario from USE CASES
- Include context about team size, industry or workflow from TARGET BUYER""",
    ),
    IntentCategory.FEATURE_BASED: IntentConfig(
        count=10,
        profile_fields=["key_differentiators", "core_features", "user_differentiators"],
        instruction="""Generate queries focused on specific features, especially DIFFERENTIATORS.

Each query should ask about a capability that maps to one of the product's unique selling points.

Vary:
- "What [category] tools offer [differentiator feature]?"
- "Is there a [category] with [specific capability]?"
- "Best [category] that integrates with [relevant tool/workflow]"

Prioritize differentiator features over generic features.""",
    ),
    IntentCategory.BUDGET_BASED: IntentConfig(
        count=8,
        profile_fields=["target_buyer", "pricing_model"],
        instruction="""Generate queries where pricing/budget is the primary concern, tailored to the TARGET BUYER.

Vary:
- "Free [category] for [buyer segment, e.g. startups]"
- "Affordable [category] under $[realistic price for segment]"
- "Best value [category] for [buyer company size]"
- "[Category] with a free tier for [buyer context]"

Match the budget language to the buyer segment: startups say "free tier", enterprise says "cost-effective at scale".""",
    ),
}
