# application/services/cost_estimator.py
import math
from typing import Iterable

from domain.models.intent import BudgetRange
from domain.models.recommendation import CostEstimate, CostLine, RecommendedAgent

# USD per agent in the keyword-fallback budget
BASE_RATE = 10.0
FALLBACK_PREMIUM_MULTIPLIER = 3

# Bulk discount for multiple agents, premium for coordination overhead
BULK_DISCOUNT = 0.8
COORDINATION_PREMIUM = 1.2

def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor

def keyword_budget(agent_count: int) -> BudgetRange:
    """Budget for agent_count agents at the flat base rate"""
    low = agent_count * BASE_RATE
    return BudgetRange(min=low, max=low * FALLBACK_PREMIUM_MULTIPLIER)

def sum_budgets(budgets: Iterable[BudgetRange]) -> BudgetRange:
    total = BudgetRange(min=0.0, max=0.0)
    for budget in budgets:
        total = total + budget
    return total

def total_cost(agents: Iterable[RecommendedAgent]) -> CostEstimate:
    """Estimated spend for hiring every agent once"""
    breakdown = tuple(
        CostLine(agent=agent.name, cost=agent.task_price or 0.0)
        for agent in agents
    )
    total = sum(line.cost for line in breakdown)

    return CostEstimate(
        min=round_half_up(total * BULK_DISCOUNT, 2),
        max=round_half_up(total * COORDINATION_PREMIUM, 2),
        breakdown=breakdown,
    )
