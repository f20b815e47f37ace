"""
Activity recommendation engine.

Responsibilities:
- Evaluate weather rules (cold, hot, windy, rainy) into an indoor bias.
- Produce deterministic rule-based recommendations from fixed candidate pools.
- Orchestrate the model-assisted strategy with the rule-based one as fallback.
- Return structured responses ready for API serialisation.
"""
