"""Test suite for parameter merging and tool-parameter validation."""

import pytest

from llm_toolchat import ConfigurationError
from llm_toolchat.params import MessageParams, merge_params, validate_tool_params
from llm_toolchat.types import ToolChoice, ToolDeclaration

WEATHER = ToolDeclaration(name="get_weather", description="Weather lookup")


class TestMergeParams:
    """Test the shallow non-zero override merge."""

    def test_override_replaces_set_fields(self):
        defaults = MessageParams(model="base", max_tokens=100, temperature=0.5)
        merged = merge_params(defaults, MessageParams(model="other", max_tokens=200))

        assert merged.model == "other"
        assert merged.max_tokens == 200
        assert merged.temperature == 0.5

    def test_zero_override_falls_back_to_default(self):
        defaults = MessageParams(model="base", temperature=0.7, top_p=0.9, top_k=40)
        merged = merge_params(
            defaults, MessageParams(model="", temperature=0.0, top_p=0.0, top_k=0)
        )

        assert merged == defaults

    def test_none_overrides_return_defaults(self):
        defaults = MessageParams(model="base", max_tokens=10)
        assert merge_params(defaults, None) is defaults
        assert merge_params(None, None) == MessageParams()

    def test_tools_and_tool_choice_override(self):
        defaults = MessageParams(tools=[WEATHER], tool_choice=ToolChoice.auto())
        merged = merge_params(
            defaults, MessageParams(tool_choice=ToolChoice.tool("get_weather"))
        )

        assert merged.tools == [WEATHER]
        assert merged.tool_choice == ToolChoice.tool("get_weather")

    def test_empty_tool_list_counts_as_set(self):
        defaults = MessageParams(tools=[WEATHER])
        merged = merge_params(defaults, MessageParams(tools=[]))

        assert merged.tools == []

    def test_merge_does_not_mutate_inputs(self):
        defaults = MessageParams(model="base")
        overrides = MessageParams(max_tokens=5)
        merge_params(defaults, overrides)

        assert defaults.max_tokens == 0
        assert overrides.model == ""

    def test_as_dict_excludes_unset(self):
        params = MessageParams(
            model="m", max_tokens=10, tools=[WEATHER], tool_choice=ToolChoice.auto()
        )
        result = params.as_dict()

        assert result["model"] == "m"
        assert "temperature" not in result
        assert result["tools"][0]["name"] == "get_weather"
        assert result["tool_choice"] == {"type": "auto"}


class TestValidateToolParams:
    """Test tool / tool-choice consistency checks."""

    def test_no_tools_no_choice_is_valid(self):
        validate_tool_params(MessageParams(model="m"))

    def test_tools_without_choice(self):
        with pytest.raises(ConfigurationError, match="tool_choice must be specified"):
            validate_tool_params(MessageParams(tools=[WEATHER]))

    @pytest.mark.parametrize("choice", [ToolChoice.auto(), ToolChoice.none()])
    def test_valid_choices(self, choice):
        validate_tool_params(MessageParams(tools=[WEATHER], tool_choice=choice))

    def test_named_choice_with_name(self):
        validate_tool_params(
            MessageParams(tools=[WEATHER], tool_choice=ToolChoice.tool("get_weather"))
        )

    def test_unknown_choice_type(self):
        with pytest.raises(ConfigurationError, match="invalid tool_choice type: any"):
            validate_tool_params(
                MessageParams(tools=[WEATHER], tool_choice=ToolChoice("any"))
            )

    def test_named_choice_without_name(self):
        with pytest.raises(ConfigurationError, match="name must be specified"):
            validate_tool_params(
                MessageParams(tools=[WEATHER], tool_choice=ToolChoice("tool", ""))
            )

    def test_named_choice_without_name_and_without_tools(self):
        with pytest.raises(ConfigurationError):
            validate_tool_params(MessageParams(tool_choice=ToolChoice("tool")))

    def test_declared_tools_need_a_handler(self):
        params = MessageParams(tools=[WEATHER], tool_choice=ToolChoice.auto())

        validate_tool_params(params, available=["get_weather"])
        with pytest.raises(ConfigurationError, match="get_weather"):
            validate_tool_params(params, available=["search"])
