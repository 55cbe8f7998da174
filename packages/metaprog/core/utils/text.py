import re

_OPENING_FENCE = re.compile(r"^\s*```[\w+-]*[ \t]*\n?")
_CLOSING_FENCE = re.compile(r"\n?[ \t]*```\s*$")


def strip_code_fences(text: str) -> str:
    """
    Remove a surrounding markdown code fence (```, ```python, ```py) and
    leading/trailing whitespace from model output.

    Text without fences is only stripped of whitespace.
    """
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = _OPENING_FENCE.sub("", stripped, count=1)
        stripped = _CLOSING_FENCE.sub("", stripped, count=1)
    return stripped.strip()
