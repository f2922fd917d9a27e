"""Input validation for entity names.

Names become directory names under the data root, so anything that could
escape the entity's collection directory is rejected up front.
"""

import re

from .errors import UsageError


class InputValidator:
    """Validates operator-supplied names."""

    PATTERNS = {
        'entity_name': re.compile(r'[A-Za-z0-9._@][A-Za-z0-9._@-]*'),
    }

    MAX_LENGTHS = {
        'entity_name': 64,
    }

    RESERVED_NAMES = {'.', '..'}

    @classmethod
    def validate_entity_name(cls, name: str, label: str) -> str:
        """Validate an organization, group or user name.

        Args:
            name: Name to validate.
            label: Entity label used in the error message.

        Returns:
            The name, unchanged.

        Raises:
            UsageError: If the name is empty, too long, reserved, starts
                with ``-`` or contains characters outside letters, digits
                and ``._@-``.
        """
        if not name:
            raise UsageError(f"The {label} name cannot be empty.")

        if len(name) > cls.MAX_LENGTHS['entity_name']:
            raise UsageError(
                f"The {label} name '{name}' cannot exceed "
                f"{cls.MAX_LENGTHS['entity_name']} characters."
            )

        if name.startswith('-'):
            raise UsageError(f"The {label} name '{name}' cannot start with '-'.")

        if name in cls.RESERVED_NAMES:
            raise UsageError(f"'{name}' is not a valid {label} name.")

        if not cls.PATTERNS['entity_name'].fullmatch(name):
            raise UsageError(
                f"Invalid {label} name '{name}' - use only letters, digits, "
                "'.', '_', '@' and '-'."
            )

        return name
