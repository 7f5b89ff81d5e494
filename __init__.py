"""
QUICKGIG Matching Service - Intent Detection and Agent Recommendation

Turns free-text work requests into capability sets and ranks registered
agents for each capability.

Features:
- LLM intent classification with a deterministic keyword fallback
- Closed capability vocabulary shared by classifier and recommender
- Concurrent per-capability recommendation with query timeouts
- Circuit breaker around the text-generation service
- Cost estimation for multi-agent work
"""

__version__ = "1.0.0"
__author__ = "QUICKGIG Team"
