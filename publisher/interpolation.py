"""``${VAR}`` placeholder expansion for configuration values."""

import re
from collections.abc import Mapping
from typing import Any

from publisher.exceptions import ConfigurationError

_VAR_PATTERN = re.compile(r"\$\{([\w-]+)\}")


def expand_vars(text: str, variables: Mapping[str, str]) -> str:
    """Replace every ``${NAME}`` in *text* with ``variables[NAME]``.

    Args:
        text: String that may contain placeholders
        variables: Placeholder values

    Returns:
        The expanded string

    Raises:
        ConfigurationError: If a placeholder names an undefined variable
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in variables:
            raise ConfigurationError(
                f"Undefined variable ${{{name}}}",
                details={"defined": sorted(variables)},
            )
        return variables[name]

    return _VAR_PATTERN.sub(_replace, text)


def expand_tree(value: Any, variables: Mapping[str, str]) -> Any:
    """Expand placeholders in every string of a parsed YAML document."""
    if isinstance(value, str):
        return expand_vars(value, variables)
    if isinstance(value, dict):
        return {key: expand_tree(item, variables) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_tree(item, variables) for item in value]
    return value
