"""Tests for FunctionGenerator."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from metaprog.core.errors import GenerationError
from metaprog.core.generation import FailureEvidence, FunctionGenerator, PromptLoadError
from metaprog.core.generation.providers.base import LLMResponse, ResponseMetadata, TokenUsage


def make_response(content: str) -> LLMResponse:
    return LLMResponse(
        content=content,
        metadata=ResponseMetadata(
            token_usage=TokenUsage(prompt_tokens=100, completion_tokens=50, total_tokens=150),
            model="test-model",
        ),
    )


@pytest.fixture
def mock_provider():
    """Mock LLM provider returning a fenced module."""
    provider = MagicMock()
    provider.generate_text_async = AsyncMock(
        return_value=make_response("```python\ndef f(a, b):\n    return a * b\n\ndefault = f\n```")
    )
    return provider


@pytest.fixture
def generator(mock_provider):
    return FunctionGenerator(mock_provider, model="test-model", temperature=0.2)


def sent_messages(provider) -> list[dict[str, str]]:
    return provider.generate_text_async.call_args.args[0]


class TestSynthesize:
    """Tests for synthesize."""

    @pytest.mark.asyncio
    async def test_strips_fences(self, generator, mock_provider):
        source = await generator.synthesize("multiply two numbers")

        assert source == "def f(a, b):\n    return a * b\n\ndefault = f"

    @pytest.mark.asyncio
    async def test_passes_model_and_temperature(self, generator, mock_provider):
        await generator.synthesize("multiply two numbers")

        kwargs = mock_provider.generate_text_async.call_args.kwargs
        assert kwargs == {"model": "test-model", "temperature": 0.2}

    @pytest.mark.asyncio
    async def test_messages_are_system_then_user(self, generator, mock_provider):
        await generator.synthesize("multiply two numbers")

        messages = sent_messages(mock_provider)
        assert [m["role"] for m in messages] == ["system", "user"]
        assert "default" in messages[0]["content"]
        assert "multiply two numbers" in messages[1]["content"]

    @pytest.mark.asyncio
    async def test_schemas_are_rendered_as_json(self, generator, mock_provider):
        await generator.synthesize("add two numbers", input_schemas=[int, int], output_schema=int)

        user = sent_messages(mock_provider)[1]["content"]
        assert "<inputSchema>" in user
        assert user.count(json.dumps({"type": "integer"}, indent=2)) == 3
        assert "<outputSchema>" in user

    @pytest.mark.asyncio
    async def test_schema_sections_omitted_when_absent(self, generator, mock_provider):
        await generator.synthesize("multiply two numbers")

        user = sent_messages(mock_provider)[1]["content"]
        assert "<inputSchema>" not in user
        assert "<outputSchema>" not in user

    @pytest.mark.asyncio
    async def test_empty_output_raises(self, generator, mock_provider):
        mock_provider.generate_text_async.return_value = make_response("```python\n```")

        with pytest.raises(GenerationError):
            await generator.synthesize("multiply two numbers")


class TestRepair:
    """Tests for repair."""

    @pytest.mark.asyncio
    async def test_example_evidence_in_prompt(self, generator, mock_provider):
        evidence = FailureEvidence(
            kind="example",
            case_label="test #1",
            arguments='["1", "2"]',
            expected="3",
            actual='"12"',
        )

        await generator.repair("add two numbers", "def add(a, b):\n    return a + b", evidence)

        user = sent_messages(mock_provider)[1]["content"]
        assert "add two numbers" in user
        assert "def add(a, b):" in user
        assert '["1", "2"]' in user
        assert "<expectedResult>\n3\n</expectedResult>" in user
        assert '<actualResult>\n"12"\n</actualResult>' in user
        assert "<raisedError>" not in user

    @pytest.mark.asyncio
    async def test_error_replaces_actual_result(self, generator, mock_provider):
        evidence = FailureEvidence(
            kind="example",
            case_label="test #1",
            arguments="[1]",
            expected="1",
            error="TypeError: boom",
        )

        await generator.repair("identity", "default = len", evidence)

        user = sent_messages(mock_provider)[1]["content"]
        assert "TypeError: boom" in user
        assert "<actualResult>" not in user

    @pytest.mark.asyncio
    async def test_predicate_evidence_in_prompt(self, generator, mock_provider):
        evidence = FailureEvidence(
            kind="predicate",
            case_label="test #1",
            predicate_source="lambda f: f(2) == 4",
            actual="false",
        )

        await generator.repair("double a number", "default = abs", evidence)

        user = sent_messages(mock_provider)[1]["content"]
        assert "<testPredicate>\nlambda f: f(2) == 4\n</testPredicate>" in user
        assert "<arguments>" not in user


class TestPromptPacks:
    """Tests for prompt pack loading."""

    def test_missing_pack_directory_raises(self, mock_provider, tmp_path):
        generator = FunctionGenerator(mock_provider, model="m", prompt_base_path=tmp_path)

        with pytest.raises(PromptLoadError):
            generator.build_messages("synthesize", {"description": "x"})

    def test_missing_user_template_raises(self, mock_provider, tmp_path):
        (tmp_path / "synthesize").mkdir()
        (tmp_path / "synthesize" / "system.j2").write_text("system")
        generator = FunctionGenerator(mock_provider, model="m", prompt_base_path=tmp_path)

        with pytest.raises(PromptLoadError, match="user.j2"):
            generator.build_messages("synthesize", {"description": "x"})
