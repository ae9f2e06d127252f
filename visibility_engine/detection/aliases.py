"""
Alias Registry Builder

Maps every brand in a scan (target and competitors) to the spellings a
model might use for it, so detection treats all of them the same way.

Deterministic variants cover most real-world naming:
- "Cal.com" -> "cal"
- "Monday-com" / "Monday com" -> "mondaycom"
- "HubSpot" -> "hub spot", "hub-spot"
- "Google Workspace" -> "workspace"
"""

import logging
import re
from typing import Dict, List

from ..clients.base import LLMCall
from ..output import parse_json_response
from ..profiler.models import Profile
from ..utils.domain import strip_domain_suffix
from .models import AliasRegistry

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_PART_SEPARATORS = re.compile(r"[\s.\-]+")
MIN_TRAILING_WORD = 5


ENRICH_PROMPT = """For each software product below, list 1-3 common abbreviations, alternate names, or domain variations that users might use to refer to it. If none exist, return an empty array.

Products: {products}

Respond ONLY with JSON:
{{"ProductName": ["alias1", "alias2"]}}"""


def generate_deterministic_aliases(brand_name: str) -> List[str]:
    """Spelling variants of a brand name, lowercase, excluding the name itself."""
    lower = brand_name.lower()
    aliases: List[str] = []

    def add(alias: str) -> None:
        if alias and alias != lower and alias not in aliases:
            aliases.append(alias)

    without_suffix = strip_domain_suffix(lower)
    if without_suffix:
        add(without_suffix)

    if "-" in lower or " " in lower:
        add(re.sub(r"[-\s]", "", lower))

    camel_split = _CAMEL_BOUNDARY.sub(r"\1 \2", brand_name).lower()
    if camel_split != lower:
        add(camel_split)
        add(camel_split.replace(" ", "-"))

    parts = [p for p in _PART_SEPARATORS.split(brand_name) if p]
    if len(parts) > 1:
        last = parts[-1].lower()
        if len(last) >= MIN_TRAILING_WORD:
            add(last)

    return aliases


def build_alias_registry(profile: Profile) -> AliasRegistry:
    """
    Build the alias registry for the target brand and every competitor.

    The brand keeps the aliases from its profile; competitors get
    deterministic variants.
    """
    brand_key = profile.brand_name.lower()
    registry: AliasRegistry = {
        brand_key: _without_key(brand_key, profile.brand_aliases),
    }

    for competitor in profile.competitors:
        key = competitor.lower()
        if key == brand_key:
            continue
        registry[key] = generate_deterministic_aliases(competitor)

    return registry


async def enrich_aliases(
    competitors: List[str],
    llm_call: LLMCall,
    registry: AliasRegistry,
) -> AliasRegistry:
    """
    Add model-suggested aliases for competitors with one batched call.

    Returns:
        The registry, merged in place; unchanged when the call or parse fails
    """
    if not competitors:
        return registry

    try:
        raw = await llm_call(ENRICH_PROMPT.format(products=", ".join(competitors)))
    except Exception as e:
        logger.warning(f"Alias enrichment call failed, using deterministic aliases only: {e}")
        return registry

    result = parse_json_response(raw, Dict[str, List[str]])
    if not result.success:
        logger.warning(f"Could not parse alias enrichment, using deterministic aliases only: {result.error}")
        return registry

    for name, suggested in result.value.items():
        key = name.lower()
        registry[key] = _without_key(key, registry.get(key, []) + suggested)

    logger.info(f"Enriched aliases for {len(result.value)} competitors")
    return registry


def _without_key(key: str, aliases: List[str]) -> List[str]:
    merged: List[str] = []
    for alias in aliases:
        alias = alias.strip().lower()
        if alias and alias != key and alias not in merged:
            merged.append(alias)
    return merged
