"""
Utilities for interpolating environment variables into configuration text.
"""
import re
from typing import Dict, List, Mapping

# ${VAR}, ${VAR:-default}, or an escaped $$
_PATTERN = re.compile(r'\$\$|\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}')

class EnvironmentInterpolator:
    """
    Substitutes ${VAR} and ${VAR:-default} references in a string.
    `$$` produces a literal `$`.
    """
    def __init__(self, context: Mapping[str, str]):
        self.context = context
        self.missing: List[str] = []

    def interpolate(self, template: str) -> str:
        """
        Interpolates the template using the context.

        Unset variables without a default become empty strings and are
        recorded in `missing`, so callers can warn about them.

        :param template: The string containing ${VAR} placeholders.
        :return: The interpolated string.
        """
        self.missing = []

        def replace(match):
            if match.group(0) == '$$':
                return '$'
            name, default = match.group(1), match.group(2)
            value = self.context.get(name)
            if value:
                return value
            if default is not None:
                return default
            if value is None:
                self.missing.append(name)
            return ''

        return _PATTERN.sub(replace, template)

    @staticmethod
    def interpolate_with(template: str, context: Dict[str, str]) -> str:
        return EnvironmentInterpolator(context).interpolate(template)
