"""
Unit Tests for the prompt intent classifier

Keyword rules, first match wins.
"""
import pytest

from appcraft.services.intent_classifier import (
    PromptClassification,
    classify_prompt,
    detect_complexity,
    detect_framework,
    detect_language,
    is_question,
    should_generate_code,
)


class TestShouldGenerateCode:
    """Build requests trigger generation, questions never do"""

    @pytest.mark.parametrize("prompt", [
        "make a calculator",
        "Create a todo app with React",
        "build me something nice",
        "weather dashboard",
        "a python script that renames files",
        "Write an algorithm for sorting",
    ])
    def test_build_requests(self, prompt):
        assert should_generate_code(prompt) is True

    @pytest.mark.parametrize("prompt", [
        "What is a todo app?",
        "how does a calculator work",
        "Why does my build fail",
        "  who is the author",
    ])
    def test_questions(self, prompt):
        assert should_generate_code(prompt) is False

    @pytest.mark.parametrize("prompt", ["hello there", "thanks!", "good morning"])
    def test_small_talk(self, prompt):
        assert should_generate_code(prompt) is False

    def test_is_question(self):
        assert is_question("Where is the file") is True
        assert is_question("Tell me what is new") is False


class TestDetectLanguage:
    """Language rules are checked in order"""

    @pytest.mark.parametrize("prompt,expected", [
        ("react todo app", "javascript"),
        ("JSX component", "javascript"),
        ("a flask api", "python"),
        ("django blog", "python"),
        ("simple html page", "html"),
        ("landing website", "html"),
        ("vue counter", "javascript"),
        ("a calculator", "javascript"),
    ])
    def test_language(self, prompt, expected):
        assert detect_language(prompt) == expected

    def test_react_wins_over_website(self):
        assert detect_language("react website") == "javascript"


class TestDetectFramework:
    """Framework is empty when nothing matches"""

    @pytest.mark.parametrize("prompt,expected", [
        ("React dashboard", "react"),
        ("vue app", "vue"),
        ("angular form", "angular"),
        ("express server", "express"),
        ("REST api for users", "express"),
        ("django site", "django"),
        ("flask app", "flask"),
        ("a calculator", ""),
    ])
    def test_framework(self, prompt, expected):
        assert detect_framework(prompt) == expected

    def test_api_matches_before_flask(self):
        assert detect_framework("flask api") == "express"


class TestDetectComplexity:
    """Simple keywords first, default intermediate"""

    @pytest.mark.parametrize("prompt,expected", [
        ("simple timer", "simple"),
        ("a basic form", "simple"),
        ("enterprise crm", "advanced"),
        ("full dashboard", "advanced"),
        ("todo app", "intermediate"),
    ])
    def test_complexity(self, prompt, expected):
        assert detect_complexity(prompt) == expected

    def test_simple_wins_over_dashboard(self):
        assert detect_complexity("simple dashboard") == "simple"


class TestClassifyPrompt:
    """All rules bundled into one result"""

    def test_bundle(self):
        result = classify_prompt("Create a simple React todo app")

        assert result == PromptClassification(
            requires_generation=True,
            is_question=False,
            language="javascript",
            framework="react",
            complexity="simple",
        )

    def test_to_dict(self):
        assert classify_prompt("what is python").to_dict() == {
            "requires_generation": False,
            "is_question": True,
            "language": "python",
            "framework": "",
            "complexity": "intermediate",
        }
