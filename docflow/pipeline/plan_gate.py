from collections.abc import Iterable


class PlanGate:
    """Feature entitlement for AI structuring, by subscription plan name."""

    def __init__(self, ai_plans: Iterable[str]) -> None:
        self._ai_plans = frozenset(plan.strip().lower() for plan in ai_plans if plan.strip())

    def allows_ai(self, plan: str | None) -> bool:
        return (plan or "").strip().lower() in self._ai_plans
