"""Jinja2 prompt packs for synthesis and repair."""

from metaprog.core.generation.prompts.loader import PROMPTS_DIR, PromptLoadError, PromptPackLoader
from metaprog.core.generation.prompts.renderer import PromptRenderer, RenderError

__all__ = [
    "PROMPTS_DIR",
    "PromptLoadError",
    "PromptPackLoader",
    "PromptRenderer",
    "RenderError",
]
