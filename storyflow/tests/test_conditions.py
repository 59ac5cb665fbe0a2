"""
Unit tests for condition strategies and the strategy factory.
"""

import pytest

from storyflow.engine.conditions import (
    ConditionStrategyFactory,
    NodeVisitStrategy,
    ProbabilityStrategy,
    VariableComparisonStrategy,
)
from storyflow.errors import UnknownConditionTypeError
from storyflow.schemas import (
    NodeVisitCondition,
    ProbabilityCondition,
    VariableComparisonCondition,
)

from conftest import ScriptedRandom


def compare(**fields) -> VariableComparisonCondition:
    return VariableComparisonCondition(**fields)


class TestProbabilityStrategy:
    """Test probability conditions against a scripted random source"""

    def test_fires_below_probability(self, game_state):
        strategy = ProbabilityStrategy(ScriptedRandom(draws=[0.3, 0.7]))
        condition = ProbabilityCondition(probability=0.5)

        assert strategy.evaluate(condition, game_state) is True
        assert strategy.evaluate(condition, game_state) is False

    def test_zero_never_fires(self, game_state):
        strategy = ProbabilityStrategy(ScriptedRandom(draws=[0.0, 0.5, 0.999]))
        condition = ProbabilityCondition(probability=0.0)

        assert not any(strategy.evaluate(condition, game_state) for _ in range(3))

    def test_one_always_fires(self, game_state):
        strategy = ProbabilityStrategy(ScriptedRandom(draws=[0.0, 0.5, 0.999]))
        condition = ProbabilityCondition(probability=1.0)

        assert all(strategy.evaluate(condition, game_state) for _ in range(3))

    def test_missing_probability_never_fires(self, game_state):
        strategy = ProbabilityStrategy(ScriptedRandom(draws=[0.0]))
        assert strategy.evaluate(ProbabilityCondition(), game_state) is False

    def test_rate_matches_probability_with_uniform_draws(self, game_state):
        """Evenly spread draws fire exactly the expected share of the time"""
        draws = [i / 1000 for i in range(1000)]
        strategy = ProbabilityStrategy(ScriptedRandom(draws=draws))
        condition = ProbabilityCondition(probability=0.3)

        fired = sum(strategy.evaluate(condition, game_state) for _ in range(1000))
        assert fired == 300


class TestVariableComparisonStrategy:
    """Test variable comparisons with literals and other variables"""

    @pytest.fixture
    def strategy(self):
        return VariableComparisonStrategy()

    @pytest.mark.parametrize(
        "operator,value,expected",
        [
            ("eq", 50, True),
            ("neq", 50, False),
            ("gt", 40, True),
            ("gte", 50, True),
            ("lt", 50, False),
            ("lte", 50, True),
        ],
    )
    def test_literal_operators(self, strategy, game_state, operator, value, expected):
        condition = compare(varId="health", operator=operator, valType="custom", value=value)
        assert strategy.evaluate(condition, game_state) is expected

    def test_operator_defaults_to_eq(self, strategy, game_state):
        condition = compare(varId="hero", value="Ann")
        assert strategy.evaluate(condition, game_state) is True

    def test_compare_with_variable(self, strategy, game_state):
        condition = compare(
            varId="health", operator="lt", valType="variable", comparisonVarId="max_health"
        )
        assert strategy.evaluate(condition, game_state) is True

    def test_boolean_equality(self, strategy, game_state):
        assert strategy.evaluate(compare(varId="brave", value=True), game_state) is True
        assert strategy.evaluate(compare(varId="brave", value=False), game_state) is False

    def test_percent_literal_is_scaled(self, strategy, game_state):
        """A percent number of 75 matches a stored fraction of 0.75"""
        condition = compare(varId="luck", operator="gte", value=75, percentType=True)
        assert strategy.evaluate(condition, game_state) is True

    def test_percent_literal_without_flag_is_not_scaled(self, strategy, game_state):
        condition = compare(varId="luck", operator="gte", value=75)
        assert strategy.evaluate(condition, game_state) is False

    def test_unknown_left_variable_is_false(self, strategy, game_state):
        condition = compare(varId="missing", operator="neq", value=1)
        assert strategy.evaluate(condition, game_state) is False

    def test_unknown_right_variable_is_false(self, strategy, game_state):
        condition = compare(
            varId="health", operator="neq", valType="variable", comparisonVarId="missing"
        )
        assert strategy.evaluate(condition, game_state) is False

    def test_unknown_operator_is_false(self, strategy, game_state):
        condition = compare(varId="health", operator="between", value=50)
        assert strategy.evaluate(condition, game_state) is False

    def test_incomparable_values_are_false(self, strategy, game_state):
        condition = compare(varId="health", operator="gt", value="abc")
        assert strategy.evaluate(condition, game_state) is False

    def test_failed_comparison_is_logged_as_warning(self, strategy, game_state, monkeypatch, caplog):
        def failing_compare(operator, left, right):
            raise ValueError("JSONLogic evaluation failed: backend error")

        monkeypatch.setattr(strategy.logic, "compare", failing_compare)
        condition = compare(varId="health", operator="eq", value=50)

        assert strategy.evaluate(condition, game_state) is False
        warnings = [r for r in caplog.records if r.levelname == "WARNING"]
        assert any("Comparison of health failed" in r.getMessage() for r in warnings)

    def test_equal_values_compare_true_through_json_logic(self, strategy, game_state, caplog):
        """Test that a matching comparison is True and logs nothing"""
        condition = compare(varId="health", operator="eq", value=50)

        assert strategy.evaluate(condition, game_state) is True
        assert "Comparison of health failed" not in caplog.text

    @pytest.mark.parametrize("value", [True, "50"])
    def test_equality_does_not_mix_kinds(self, strategy, game_state, value):
        """Test that an integer never equals a boolean or a numeric string"""
        assert strategy.evaluate(compare(varId="health", operator="eq", value=value), game_state) is False
        assert strategy.evaluate(compare(varId="health", operator="neq", value=value), game_state) is True


class TestNodeVisitStrategy:
    """Test node_happened and node_not_happened"""

    def test_node_happened(self, game_state):
        strategy = NodeVisitStrategy()
        assert strategy.evaluate(NodeVisitCondition(type="node_happened", nodeId="seen"), game_state)
        assert not strategy.evaluate(
            NodeVisitCondition(type="node_happened", nodeId="unseen"), game_state
        )

    def test_node_not_happened(self, game_state):
        strategy = NodeVisitStrategy()
        assert strategy.evaluate(
            NodeVisitCondition(type="node_not_happened", nodeId="unseen"), game_state
        )
        assert not strategy.evaluate(
            NodeVisitCondition(type="node_not_happened", nodeId="seen"), game_state
        )

    def test_missing_node_id_is_false_for_both_kinds(self, game_state):
        strategy = NodeVisitStrategy()
        assert strategy.evaluate(NodeVisitCondition(type="node_happened"), game_state) is False
        assert strategy.evaluate(NodeVisitCondition(type="node_not_happened"), game_state) is False


class TestConditionStrategyFactory:
    """Test strategy lookup and memoization"""

    def test_returns_strategy_per_kind(self):
        factory = ConditionStrategyFactory(ScriptedRandom())
        assert isinstance(factory.get_strategy("probability"), ProbabilityStrategy)
        assert isinstance(factory.get_strategy("variable_comparison"), VariableComparisonStrategy)
        assert isinstance(factory.get_strategy("node_happened"), NodeVisitStrategy)

    def test_strategies_are_memoized(self):
        factory = ConditionStrategyFactory(ScriptedRandom())
        assert factory.get_strategy("probability") is factory.get_strategy("probability")

    def test_visit_kinds_share_one_strategy(self):
        factory = ConditionStrategyFactory(ScriptedRandom())
        assert factory.get_strategy("node_happened") is factory.get_strategy("node_not_happened")

    def test_probability_uses_injected_random_source(self):
        random_source = ScriptedRandom()
        factory = ConditionStrategyFactory(random_source)
        assert factory.get_strategy("probability").random_source is random_source

    def test_unknown_kind_raises(self):
        factory = ConditionStrategyFactory(ScriptedRandom())
        with pytest.raises(UnknownConditionTypeError) as exc_info:
            factory.get_strategy("weather")
        assert exc_info.value.condition_type == "weather"
