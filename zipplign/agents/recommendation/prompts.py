"""
Recommendation Prompt Templates

Contains the system prompt and the user prompt renderer for the
Recommendation Flow.

Prompt Engineering Pattern:
- System prompt defines the ROLE (plus the JSON output format when a
  response schema is used)
- User prompt carries the viewing context and the output instructions
- Rendering is a pure function of the request, so identical requests
  always produce byte-identical prompts
"""

from typing import List

from zipplign.agents.recommendation.schemas import RecommendationRequest

NO_VIEWING_HISTORY = "No viewing history available."
NO_TRENDING_TAGS = "No trending tags available."

# =============================================================================
# SYSTEM PROMPT
# =============================================================================

RECOMMENDATION_SYSTEM_PROMPT = """You are a Zippclip recommendation expert for Zipplign, a short-video social app.

<role>
Given a user's viewing history and the tags currently trending across the app,
you pick Zippclips the user would enjoy watching next.
</role>

<rules>
- Only answer with Zippclip IDs
- Never add explanations, numbering, or commentary
- Prefer variety over repeating what the user already watched
</rules>"""

# Used with response_schema; the JSON schema replaces the line format
# requested at the end of the user prompt.
STRUCTURED_OUTPUT_SYSTEM_PROMPT = RECOMMENDATION_SYSTEM_PROMPT + """

<output_format>
Answer with a JSON object matching the response schema. Put the Zippclip IDs,
in order, in the "recommendations" array instead of writing one per line.
</output_format>"""


# =============================================================================
# USER PROMPT RENDERER
# =============================================================================

def _render_section(entries: List[str], placeholder: str) -> str:
    if not entries:
        return placeholder
    return "\n" + "\n".join(f"- {entry}" for entry in entries)


def render_recommendation_prompt(request: RecommendationRequest) -> str:
    """
    Render the user prompt for a validated recommendation request.

    Viewing history and trending tags are rendered as bulleted lists in their
    original order, or as a fixed placeholder sentence when empty.

    Args:
        request: Validated recommendation request

    Returns:
        str: Prompt ready to be sent to the model
    """
    history_section = _render_section(request.viewing_history, NO_VIEWING_HISTORY)
    tags_section = _render_section(request.trending_tags, NO_TRENDING_TAGS)
    n = request.num_recommendations

    return f"""Given a user's viewing history and current trending tags, recommend Zippclips that the user would enjoy.

User Viewing History: {history_section}
Trending Tags: {tags_section}

Recommend exactly {n} Zippclip IDs that the user would enjoy based on their viewing history and the current trending tags. Return only the IDs, one ID per line, with no other text."""
