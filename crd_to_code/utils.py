"""
Utility functions for the CRD to Code generator.
"""


def _split_into_words(text: str) -> list[str]:
    """Split text into words on non-alphanumeric separators and camelCase boundaries.

    A boundary is placed after a non-uppercase character that is followed by an
    uppercase one, and before the last capital of an acronym that is followed by
    a lowercase character ("HTTPServer" -> "HTTP", "Server"). Digits never start
    a new word.
    """
    words = []
    chunk = ""
    for char in text + "\0":
        if char.isalnum():
            chunk += char
            continue
        if chunk:
            words.extend(_split_chunk(chunk))
        chunk = ""
    return words


def _split_chunk(chunk: str) -> list[str]:
    words = []
    start = 0
    mode = None  # None (boundary), "lower" or "upper"
    for i, char in enumerate(chunk):
        if i + 1 == len(chunk):
            words.append(chunk[start:])
            break
        following = chunk[i + 1]
        if char.islower():
            next_mode = "lower"
        elif char.isupper():
            next_mode = "upper"
        else:
            next_mode = mode
        if next_mode == "lower" and following.isupper():
            words.append(chunk[start : i + 1])
            start = i + 1
            mode = None
        elif mode == "upper" and char.isupper() and following.islower():
            words.append(chunk[start:i])
            start = i
            mode = None
        else:
            mode = next_mode
    return [word for word in words if word]


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def to_upper_camel_case(text: str) -> str:
    """Convert snake_case, kebab-case or camelCase text to UpperCamelCase.

    Examples:
        "validations_info" -> "ValidationsInfo"
        "jwks-uri" -> "JwksUri"
        "matchLabels" -> "MatchLabels"
        "ABC" -> "Abc"
        "dns01" -> "Dns01"
    """
    return "".join(_capitalize(word) for word in _split_into_words(text))


def to_pascal_case(text: str) -> str:
    """Alias of to_upper_camel_case, used for enum variant names."""
    return to_upper_camel_case(text)


def to_snake_case(text: str) -> str:
    """Convert camelCase, kebab-case or PascalCase text to snake_case.

    Examples:
        "jwksUri" -> "jwks_uri"
        "JwksUri" -> "jwks_uri"
        "x-kubernetes-int-or-string" -> "x_kubernetes_int_or_string"
    """
    return "_".join(word.lower() for word in _split_into_words(text))
