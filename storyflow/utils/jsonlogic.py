"""
JSONLogic evaluator for variable comparisons
"""

from typing import Any, Dict

import json_logic as jsonlogic

# Comparison operator names used by story documents
COMPARISON_OPERATORS = {
    "eq": "==",
    "neq": "!=",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
}

EQUALITY_OPERATORS = {"eq", "neq"}


def value_kind(value: Any) -> str:
    """Kind of a scalar for strict equality; int and float are both numbers"""

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    return type(value).__name__


class JSONLogicEvaluator:
    """Evaluates JSONLogic expressions against a context"""

    def __init__(self):
        self.evaluator = jsonlogic

    def evaluate(self, expression: Dict[str, Any], context: Dict[str, Any]) -> Any:
        """Evaluate a JSONLogic expression against context"""

        try:
            return self.evaluator.jsonLogic(expression, context)
        except Exception as e:
            raise ValueError(f"JSONLogic evaluation failed: {e}")

    def evaluate_condition(
        self, condition: Dict[str, Any], context: Dict[str, Any]
    ) -> bool:
        """Evaluate a condition and return boolean result"""

        return bool(self.evaluate(condition, context))

    def compare(self, operator: str, left: Any, right: Any) -> bool:
        """Apply a story comparison operator (eq, neq, gt, ...) to two operands.

        Operands are passed through ``var`` lookups so that literal values are
        never interpreted as logic. Equality is strict about kinds: a boolean
        never equals a number and a string never equals a number, unlike
        JSONLogic's loose ``==``. Raises KeyError for an unknown operator and
        ValueError when the operands cannot be compared.
        """

        logic_operator = COMPARISON_OPERATORS[operator]
        if operator in EQUALITY_OPERATORS and value_kind(left) != value_kind(right):
            return operator == "neq"
        expression = {logic_operator: [{"var": "left"}, {"var": "right"}]}
        return self.evaluate_condition(expression, {"left": left, "right": right})
