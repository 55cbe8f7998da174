"""Prompt template rendering with Jinja2."""

from __future__ import annotations

import logging
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateSyntaxError, UndefinedError

from metaprog.core.errors import MetaprogError

logger = logging.getLogger(__name__)


class RenderError(MetaprogError):
    """Raised when template rendering fails."""


class PromptRenderer:
    """Renders prompt templates using Jinja2.

    Features:
    - Jinja2 strict mode (StrictUndefined)
    - Fail-fast on missing variables
    """

    def __init__(self) -> None:
        self.env = Environment(
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            autoescape=False,
        )

    def render(self, template: str, variables: dict[str, Any]) -> str:
        """Render template with variables.

        Raises:
            RenderError: If rendering fails (missing variables, syntax errors, etc.)
        """
        try:
            jinja_template = self.env.from_string(template)
            return jinja_template.render(**variables)

        except UndefinedError as e:
            raise RenderError(f"Missing variable in template: {e}") from e

        except TemplateSyntaxError as e:
            raise RenderError(f"Invalid template syntax: {e}") from e
