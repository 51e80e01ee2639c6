"""
Cricket Predictor

Tiered match-outcome prediction engine: Elo rating model, feature ensemble,
prediction cache and a mode orchestrator with static fallback.
"""

__version__ = "1.0.0"
