"""Handlebars prompt templates for the adventure narrator."""

import functools
from collections.abc import Callable
from typing import Any

import pybars

from .models import AdventureSettings


class PromptError(Exception):
    """A prompt template could not be compiled or rendered."""


# Triple-stash so player text is inserted without HTML escaping.
OPENING_TEMPLATE = """\
Act as a text adventure game engine. Create the opening scene for an interactive story with the following settings:

Setting: {{{setting}}}
Genre: {{{genre}}}
Player Character: {{{playerCharacter}}}
Theme: {{{theme}}}
Tone/Style: {{{toneStyle}}}
Additional Details: {{{additionalDetails}}}

Follow these guidelines:
1. Start with a vivid description of the opening scene
2. Establish the player's immediate situation and motivation
3. Present 3-4 clear initial choices for the player
4. Keep descriptions concise but atmospheric
5. Include relevant sensory details
6. End with "What would you like to do?"

Limit to 300 words"""

ACTION_TEMPLATE = """\
Continue the adventure based on the player's action:
"{{{action}}}"

Guidelines:
1. Describe the result of the action vividly but concisely
2. Include relevant consequences and changes to the environment
3. Present 2-3 new possible actions based on the new situation
4. Keep descriptions atmospheric and engaging
5. End with "What would you like to do?"

Limit the response to 250 words."""


@functools.lru_cache(maxsize=None)
def _compile(source: str) -> Callable:
    return pybars.Compiler().compile(source)


def render_prompt(source: str, values: dict[str, Any]) -> str:
    """Render Handlebars `source` with `values`; compiled templates are memoised."""
    try:
        return _compile(source)(values)
    except Exception as e:
        raise PromptError(f"Cannot render prompt template: {e}") from e


def build_opening_prompt(settings: AdventureSettings) -> str:
    """Prompt for the opening scene of a new adventure."""
    return render_prompt(OPENING_TEMPLATE, settings.model_dump(by_alias=True))


def build_action_prompt(action: str) -> str:
    """Prompt continuing the story after a free-text player action."""
    return render_prompt(ACTION_TEMPLATE, {"action": action})
