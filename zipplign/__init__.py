"""
Zipplign backend.

FastAPI service behind the Zipplign short-video app. Its main feature is the
Zippclip recommendation flow in zipplign.agents.recommendation.
"""

__version__ = "0.1.0"
