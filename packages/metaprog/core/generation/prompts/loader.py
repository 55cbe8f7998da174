"""Prompt pack loader."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from metaprog.core.errors import MetaprogError
from metaprog.core.generation.prompts.renderer import PromptRenderer

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).parent


class PromptLoadError(MetaprogError):
    """Raised when prompt pack loading fails."""


class PromptPackLoader:
    """Loads prompt packs from the filesystem.

    Prompt Pack Structure:
        pack_name/
        ├── system.j2            # Required: System prompt
        └── user.j2              # Required: User message template
    """

    REQUIRED_TEMPLATES = ("system", "user")

    def __init__(self, base_path: str | Path = PROMPTS_DIR):
        self.base_path = Path(base_path)
        self.renderer = PromptRenderer()
        self._templates: dict[str, dict[str, str]] = {}

        logger.debug(f"PromptPackLoader initialized: base_path={self.base_path}")

    def load(self, pack_name: str) -> dict[str, str]:
        """Load prompt pack templates (not rendered).

        Packs are read once and memoized.

        Raises:
            PromptLoadError: If the pack or one of its templates is missing
        """
        if pack_name in self._templates:
            return self._templates[pack_name]

        pack_dir = self.base_path / pack_name
        if not pack_dir.is_dir():
            raise PromptLoadError(f"Prompt pack '{pack_name}' does not exist at {pack_dir}")

        prompts: dict[str, str] = {}
        for name in self.REQUIRED_TEMPLATES:
            template_path = pack_dir / f"{name}.j2"
            if not template_path.exists():
                raise PromptLoadError(
                    f"Prompt pack '{pack_name}' missing required {name}.j2 at {template_path}"
                )
            prompts[name] = template_path.read_text(encoding="utf-8")

        logger.debug(f"Loaded prompt pack '{pack_name}': {list(prompts.keys())}")
        self._templates[pack_name] = prompts
        return prompts

    def load_and_render(self, pack_name: str, variables: dict[str, Any]) -> dict[str, str]:
        """Load and render a prompt pack.

        Raises:
            PromptLoadError: If loading fails
            RenderError: If rendering fails
        """
        prompts = self.load(pack_name)
        return {
            name: self.renderer.render(template, variables).strip()
            for name, template in prompts.items()
        }
