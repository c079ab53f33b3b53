"""Instruction templating with a fixed placeholder set."""

from __future__ import annotations

import json
import re

from personaflow.runtime.context import ExecutionContext

PLACEHOLDERS = {
    "input": "The run's triggering text",
    "context": "JSON of input, last_output and variables",
    "user_profile": "JSON of the user profile snapshot",
}

TEMPLATE_PATTERN = re.compile(r"\{\{\s*([\w.-]+)\s*\}\}")


def render_instruction(template: str, context: ExecutionContext) -> str:
    """Substitute every ``{{input}}``, ``{{context}}`` and ``{{user_profile}}``.

    Other ``{{...}}`` sequences are left as written.
    """
    values = {
        "input": context.input,
        "context": json.dumps(context.to_dict(), ensure_ascii=False, default=str),
        "user_profile": json.dumps(dict(context.user_profile), ensure_ascii=False, default=str),
    }

    def replacer(match: re.Match) -> str:
        name = match.group(1)
        if name not in values:
            return match.group(0)
        return values[name]

    return TEMPLATE_PATTERN.sub(replacer, template)
