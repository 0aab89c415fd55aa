"""
Naming helpers shared by the analyzer and the backends.
"""

import re

# Anything that cannot appear in a Dart identifier becomes a word separator
_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9_]")
_SEPARATORS = re.compile(r"[_\s]+")
_UNDERSCORE_RUNS = re.compile(r"_+")
_LEADING_DIGIT = re.compile(r"^[0-9]")

DART_RESERVED_WORDS = {
    "abstract",
    "as",
    "assert",
    "async",
    "await",
    "break",
    "case",
    "catch",
    "class",
    "const",
    "continue",
    "covariant",
    "default",
    "deferred",
    "do",
    "dynamic",
    "else",
    "enum",
    "export",
    "extends",
    "extension",
    "external",
    "factory",
    "false",
    "final",
    "finally",
    "for",
    "get",
    "if",
    "implements",
    "import",
    "in",
    "interface",
    "is",
    "late",
    "library",
    "mixin",
    "new",
    "null",
    "operator",
    "part",
    "required",
    "rethrow",
    "return",
    "set",
    "static",
    "super",
    "switch",
    "this",
    "throw",
    "true",
    "try",
    "typedef",
    "var",
    "void",
    "while",
    "with",
    "yield",
}

# Names an enum constant cannot take (Enum built-ins and the generated value field)
DART_ENUM_MEMBERS = {"values", "index", "name", "value", "hashCode", "runtimeType", "toString", "noSuchMethod"}


def _split_words(text: str) -> list[str]:
    """Split text into words on any non-identifier character or underscore."""
    normalized = _NON_IDENTIFIER.sub("_", text)
    return [part for part in _SEPARATORS.split(normalized) if part]


def to_pascal_case(text: str) -> str:
    """Convert a schema key to a PascalCase class name.

    Only the first letter of each word is upper-cased, the rest of the word
    is kept as written so existing camelCase humps survive.

    Examples:
        "user" -> "User"
        "order_item" -> "OrderItem"
        "pet-store.Owner" -> "PetStoreOwner"
        "userProfile" -> "UserProfile"
        "" -> "Unknown"
    """
    words = _split_words(text)
    if not words:
        return "Unknown"
    return "".join(word[0].upper() + word[1:] for word in words)


def to_snake_case(text: str) -> str:
    """Convert a schema key to the snake_case stem used for file names.

    Examples:
        "UserProfile" -> "user_profile"
        "order_item" -> "order_item"
    """
    pascal = to_pascal_case(text)
    chars = []
    for i, char in enumerate(pascal):
        if char.isupper() and i > 0:
            chars.append("_")
        chars.append(char.lower())
    return "".join(chars)


def to_camel_case(text: str) -> str:
    """Convert a JSON key to a lowerCamelCase field name."""
    words = _split_words(text)
    if not words:
        return ""
    pascal = "".join(word[0].upper() + word[1:] for word in words)
    return pascal[0].lower() + pascal[1:]


def to_field_name(text: str) -> str:
    """Convert a JSON key to a Dart field name, escaping reserved words."""
    name = to_camel_case(text)
    if not name:
        return "value"
    if _LEADING_DIGIT.match(name):
        name = f"value{name}"
    if name in DART_RESERVED_WORDS:
        name = f"{name}_"
    return name


def to_enum_value_name(value: str) -> str:
    """Sanitize an enum literal or display name into a Dart enum member name.

    Examples:
        "in-progress" -> "in_progress"
        "2fa" -> "value_2fa"
        "!!!" -> "unknown"
    """
    cleaned = _UNDERSCORE_RUNS.sub("_", _NON_IDENTIFIER.sub("_", value)).strip()
    if not cleaned or cleaned == "_":
        return "unknown"
    if _LEADING_DIGIT.match(cleaned):
        return f"value_{cleaned}"
    if cleaned in DART_RESERVED_WORDS or cleaned in DART_ENUM_MEMBERS:
        return f"{cleaned}_"
    return cleaned
