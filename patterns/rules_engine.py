"""Pure-function rules engine pattern.

Rules are stateless functions: (entity, context) -> RuleResult.
No database, no side effects. This makes them:
- Trivially testable (pure input/output)
- Composable (run in sequence, stop at the first failure)
- Auditable (deterministic, explainable)

Callers fetch whatever data a rule needs, then hand it over as plain values.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class RuleResult:
    """Outcome of a single rule evaluation."""

    passed: bool
    rule_name: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


def passed(rule_name: str, message: str = "ok", **details: Any) -> RuleResult:
    return RuleResult(passed=True, rule_name=rule_name, message=message, details=details)


def failed(rule_name: str, message: str, **details: Any) -> RuleResult:
    return RuleResult(passed=False, rule_name=rule_name, message=message, details=details)


# ---------------------------------------------------------------------------
# Rule composition
# ---------------------------------------------------------------------------

async def first_failure(
    checks: Iterable[Callable[[], Awaitable[RuleResult]]],
) -> tuple[RuleResult | None, list[RuleResult]]:
    """Run checks in order and stop at the first one that fails.

    Each check is a zero-argument coroutine function, so later checks never
    load their data once an earlier one has failed.

    Returns (failure_or_None, results_evaluated)::

        failure, evaluated = await first_failure([
            lambda: completeness(product_id, options),
            lambda: compatibility(option_ids),
        ])
        if failure is None:
            proceed()
    """
    evaluated: list[RuleResult] = []
    for check in checks:
        result = await check()
        evaluated.append(result)
        if not result.passed:
            return result, evaluated
    return None, evaluated
