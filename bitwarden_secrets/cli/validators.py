"""Input validation for CLI arguments."""
import re
import sys

# bws identifiers are UUIDs, but anything without whitespace is passed through
_IDENTIFIER_PATTERN = re.compile(r'^\S+$')


def validate_identifier(value: str, label: str = "ID") -> None:
    """
    Validate a secret or project identifier given on the command line.

    Args:
        value: Identifier to validate
        label: Name used in error messages (e.g. "Secret ID")

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not value:
        print(f"Error: {label} cannot be empty", file=sys.stderr)
        sys.exit(2)

    if not _IDENTIFIER_PATTERN.match(value):
        print(f"Error: Invalid {label} '{value}'", file=sys.stderr)
        print("\nIdentifiers cannot contain spaces or other whitespace.", file=sys.stderr)
        print("Find identifiers with: bws-provider secret list / bws-provider project list", file=sys.stderr)
        sys.exit(2)


def validate_required_text(value: str, label: str) -> None:
    """
    Validate that a required text argument (key, name) is not blank.

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not value or value.strip() == "":
        print(f"Error: {label} cannot be empty", file=sys.stderr)
        sys.exit(2)
