"""Unit tests for ModelDowngradePolicy (providers/policy.py)."""

import itertools

import pytest

from chatrelay.providers.policy import ModelDowngradePolicy

_SHARED_KEY = "sk-shared"


@pytest.fixture
def policy() -> ModelDowngradePolicy:
    return ModelDowngradePolicy(default_api_key=_SHARED_KEY)


class TestDowngradeMatrix:
    """The rewrite happens only when all three conditions hold."""

    @pytest.mark.parametrize(
        "many_messages, shared_key, premium_model",
        list(itertools.product([True, False], repeat=3)),
    )
    def test_all_combinations(
        self,
        policy: ModelDowngradePolicy,
        many_messages: bool,
        shared_key: bool,
        premium_model: bool,
    ) -> None:
        message_count = 3 if many_messages else 2
        api_key = _SHARED_KEY if shared_key else "sk-own"
        model = "gpt-4-turbo" if premium_model else "gpt-3.5-turbo"

        resolved = policy.resolve_model(model, message_count, api_key)

        if many_messages and shared_key and premium_model:
            assert resolved == "gpt-3.5-turbo-16k"
        else:
            assert resolved == model


class TestDowngradeExamples:
    def test_three_messages_shared_key_downgrades_gpt4(self, policy: ModelDowngradePolicy) -> None:
        assert policy.resolve_model("gpt-4", 3, _SHARED_KEY) == "gpt-3.5-turbo-16k"

    def test_distinct_key_keeps_gpt4(self, policy: ModelDowngradePolicy) -> None:
        assert policy.resolve_model("gpt-4", 3, "sk-bring-your-own") == "gpt-4"

    def test_single_message_keeps_gpt4(self, policy: ModelDowngradePolicy) -> None:
        assert policy.resolve_model("gpt-4", 1, _SHARED_KEY) == "gpt-4"

    def test_prefix_match_covers_variants(self, policy: ModelDowngradePolicy) -> None:
        assert policy.resolve_model("gpt-4o-mini", 5, _SHARED_KEY) == "gpt-3.5-turbo-16k"

    def test_key_comparison_is_exact(self, policy: ModelDowngradePolicy) -> None:
        assert policy.resolve_model("gpt-4", 3, _SHARED_KEY + " ") == "gpt-4"

    def test_no_server_key_never_downgrades(self) -> None:
        policy = ModelDowngradePolicy(default_api_key=None)
        assert not policy.should_downgrade("gpt-4", 10, "")

    def test_custom_policy_values(self) -> None:
        policy = ModelDowngradePolicy(
            default_api_key=_SHARED_KEY,
            premium_prefix="claude-opus",
            fallback_model="claude-haiku",
            message_threshold=0,
        )
        assert policy.resolve_model("claude-opus-4", 1, _SHARED_KEY) == "claude-haiku"
