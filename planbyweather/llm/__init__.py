"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Build the activity-planning prompt from city, preferences, weather and rule hints.
- Request strictly structured output and decode it into recommendations.
- Report every failure as a ModelGenerationError so callers can fall back.
"""
