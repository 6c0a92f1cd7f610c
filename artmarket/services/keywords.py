"""
Prefix keyword generation for type-ahead search.
"""


def generate_keywords(text: str | None, include_full: bool = False) -> set[str]:
    """
    All prefixes (length >= 1) of each lowercased whitespace-separated token.

    generate_keywords("Blue Sky") == {"b", "bl", "blu", "blue", "s", "sk", "sky"}

    Args:
        text: Source string (None or blank yields an empty set)
        include_full: Also include the whole lowercased, whitespace-normalized string

    Returns:
        Set of keywords
    """
    if not text:
        return set()
    tokens = text.lower().split()
    keywords = {token[:end] for token in tokens for end in range(1, len(token) + 1)}
    if include_full and tokens:
        keywords.add(" ".join(tokens))
    return keywords
