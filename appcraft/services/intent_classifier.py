"""
Prompt Intent Classifier

Keyword rules that decide whether a chat prompt should trigger code
generation, and which language / framework / complexity to ask the code
generator for. Rules are checked in order and the first match wins.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any


CREATION_WORDS = ['make', 'create', 'build', 'generate', 'develop', 'design', 'write']

APP_INDICATORS = [
    'app', 'website', 'page', 'tool', 'calculator', 'converter', 'tracker',
    'timer', 'clock', 'weather', 'todo', 'list', 'form', 'login', 'signup',
    'dashboard', 'gallery', 'portfolio', 'blog', 'shop', 'game', 'quiz',
    'chart', 'graph', 'button', 'menu', 'navbar', 'sidebar', 'modal'
]

FUNCTIONAL_WORDS = ['function', 'script', 'code', 'program', 'algorithm', 'component']

QUESTION_STARTERS = ['what is', 'how does', 'why does', 'when does', 'where is', 'who is']

# (keywords, value) pairs, first match wins
LANGUAGE_RULES = [
    (['react', 'jsx'], 'javascript'),
    (['python', 'django', 'flask'], 'python'),
    (['html', 'css', 'website'], 'html'),
    (['vue', 'angular', 'javascript'], 'javascript'),
]
DEFAULT_LANGUAGE = 'javascript'

FRAMEWORK_RULES = [
    (['react'], 'react'),
    (['vue'], 'vue'),
    (['angular'], 'angular'),
    (['express', 'api'], 'express'),
    (['django'], 'django'),
    (['flask'], 'flask'),
]

COMPLEXITY_RULES = [
    (['simple', 'basic', 'quick'], 'simple'),
    (['advanced', 'complex', 'enterprise'], 'advanced'),
    (['dashboard', 'full', 'complete'], 'advanced'),
]
DEFAULT_COMPLEXITY = 'intermediate'


@dataclass
class PromptClassification:
    requires_generation: bool
    is_question: bool
    language: str
    framework: str
    complexity: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _first_match(prompt_lower: str, rules, default: str) -> str:
    for keywords, value in rules:
        if any(keyword in prompt_lower for keyword in keywords):
            return value
    return default


def is_question(prompt: str) -> bool:
    prompt_lower = prompt.lower().strip()
    return any(prompt_lower.startswith(starter) for starter in QUESTION_STARTERS)


def should_generate_code(prompt: str) -> bool:
    """
    True when the prompt looks like a request to build something.

    Questions ("what is ...", "how does ...") never trigger generation,
    even when they mention an app.
    """
    prompt_lower = prompt.lower().strip()

    if is_question(prompt_lower):
        return False

    has_creation_word = any(word in prompt_lower for word in CREATION_WORDS)
    has_app_indicator = any(indicator in prompt_lower for indicator in APP_INDICATORS)
    has_functional_word = any(word in prompt_lower for word in FUNCTIONAL_WORDS)

    return has_creation_word or has_app_indicator or has_functional_word


def detect_language(prompt: str) -> str:
    return _first_match(prompt.lower(), LANGUAGE_RULES, DEFAULT_LANGUAGE)


def detect_framework(prompt: str) -> str:
    return _first_match(prompt.lower(), FRAMEWORK_RULES, '')


def detect_complexity(prompt: str) -> str:
    return _first_match(prompt.lower(), COMPLEXITY_RULES, DEFAULT_COMPLEXITY)


def classify_prompt(prompt: str) -> PromptClassification:
    return PromptClassification(
        requires_generation=should_generate_code(prompt),
        is_question=is_question(prompt),
        language=detect_language(prompt),
        framework=detect_framework(prompt),
        complexity=detect_complexity(prompt),
    )
