"""
AI Components for the Zipplign backend.

1. Recommendation System (Single-Shot LLM)
   - Uses Gemini with schema-constrained output to pick Zippclips
   - NOT an ADK agent - uses the Google Gen AI SDK directly
   - Located in: zipplign/agents/recommendation/
"""

from zipplign.agents.recommendation import recommend

__all__ = ["recommend"]
