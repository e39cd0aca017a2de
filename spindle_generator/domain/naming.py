"""
Naming convention utilities for Spindle Generator.

Every identifier the generator emits (class names, property names, variable
names, labels, URL slugs) is derived here. All transforms share one
word-boundary split so that the same metadata name always produces the same
token, whichever convention a template asks for.
"""

import re
from typing import AbstractSet, List, Mapping

from ..constants import (
    INVARIANT_PLURALS,
    IRREGULAR_PLURALS,
    RESERVED_WORDS,
    VERBATIM_PREFIX,
    VOWELS,
)


# Word boundaries inside a token (separators are handled first):
#   invoiceLine -> invoice|Line, HTTPServer -> HTTP|Server,
#   2Fa -> 2|Fa, address2 -> address|2
CAMEL_BOUNDARY = re.compile(
    r"(?<=[a-z])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])|(?<=\d)(?=[A-Za-z])|(?<=[A-Za-z])(?=\d)"
)
SEPARATORS = re.compile(r"[\s_\-]+")


def split_words(name: str) -> List[str]:
    """
    Split an identifier into its words.

    Separators (whitespace, underscore, hyphen) always split. Inside each
    separated token, a boundary falls before an uppercase letter following a
    lowercase letter, before an uppercase letter starting a new capitalized
    run, and between letters and digits.

    Example:
        >>> split_words("invoice_line_id")
        ['invoice', 'line', 'id']
        >>> split_words("XMLHttpRequest")
        ['XML', 'Http', 'Request']
    """
    if not name or not name.strip():
        return []

    words = []
    for token in SEPARATORS.split(name.strip()):
        if token:
            words.extend(part for part in CAMEL_BOUNDARY.split(token) if part)
    return words


def capitalize(value: str) -> str:
    """Uppercase the first character only."""
    if not value:
        return value
    return value[0].upper() + value[1:]


def decapitalize(value: str) -> str:
    """Lowercase the first character only."""
    if not value:
        return value
    return value[0].lower() + value[1:]


def to_pascal_case(name: str) -> str:
    """
    Convert any naming convention to PascalCase.

    Example:
        >>> to_pascal_case("invoice_id")
        'InvoiceId'
        >>> to_pascal_case("OrderID")
        'OrderId'
    """
    return "".join(capitalize(word.lower()) for word in split_words(name))


def to_camel_case(name: str) -> str:
    return decapitalize(to_pascal_case(name))


def to_snake_case(name: str) -> str:
    """
    Convert any naming convention to snake_case.

    Example:
        >>> to_snake_case("InvoiceLine")
        'invoice_line'
    """
    return "_".join(word.lower() for word in split_words(name))


def to_kebab_case(name: str) -> str:
    return "-".join(word.lower() for word in split_words(name))


def to_sentence_case(name: str, to_lower: bool = True) -> str:
    """
    Convert an identifier to words separated by spaces.

    Args:
        name: Identifier to convert
        to_lower: Lowercase every word (default), otherwise keep the casing

    Example:
        >>> to_sentence_case("InvoiceLine")
        'invoice line'
    """
    sentence = " ".join(split_words(name))
    return sentence.lower() if to_lower else sentence


def to_title_case(name: str) -> str:
    return " ".join(capitalize(word.lower()) for word in split_words(name))


def preserve_casing(source: str, pattern: str) -> str:
    """
    Apply the casing of ``pattern`` to ``source``.

    An all-upper pattern uppercases the source, an all-lower pattern lowercases
    it, and a capitalized pattern capitalizes the lowercased source. Any other
    pattern is mapped character by character; source characters beyond the
    end of the pattern are lowercased.

    Example:
        >>> preserve_casing("people", "Person")
        'People'
        >>> preserve_casing("people", "PERSON")
        'PEOPLE'
    """
    if not source or not pattern:
        return source

    if pattern == pattern.upper():
        return source.upper()

    if pattern == pattern.lower():
        return source.lower()

    rest = pattern[1:]
    if pattern[0].isupper() and rest and rest == rest.lower():
        return capitalize(source.lower())

    mapped = []
    for index, char in enumerate(source):
        if index < len(pattern) and pattern[index].isupper():
            mapped.append(char.upper())
        else:
            mapped.append(char.lower())
    return "".join(mapped)


def _is_vowel(char: str) -> bool:
    return char in VOWELS


def pluralize(
    noun: str,
    irregular: Mapping[str, str] = IRREGULAR_PLURALS,
    invariant: AbstractSet[str] = INVARIANT_PLURALS,
) -> str:
    """
    Return the plural form of a singular noun.

    Irregular words are checked first (case-insensitively, with the casing of
    the input preserved), invariant words are returned unchanged, and the
    remaining words follow the suffix rules below, first match wins:

    1. consonant + "o" -> + "es"   (hero -> heroes)
    2. consonant + "y" -> "ies"    (city -> cities)
    3. "s", "x", "z", "ch", "sh" -> + "es"
    4. "f" -> "ves", "fe" -> "ves"
    5. anything else -> + "s"

    Example:
        >>> pluralize("box")
        'boxes'
        >>> pluralize("Person")
        'People'
    """
    if not noun or not noun.strip():
        return noun

    lowered = noun.lower()

    if lowered in invariant:
        return noun

    if lowered in irregular:
        return preserve_casing(irregular[lowered], noun)

    if len(noun) > 1 and lowered.endswith("o") and not _is_vowel(noun[-2]):
        return noun + "es"

    if len(noun) > 1 and lowered.endswith("y") and not _is_vowel(noun[-2]):
        return noun[:-1] + "ies"

    if lowered.endswith(("s", "x", "z", "ch", "sh")):
        return noun + "es"

    if lowered.endswith("f"):
        return noun[:-1] + "ves"

    if lowered.endswith("fe"):
        return noun[:-2] + "ves"

    return noun + "s"


def escape_reserved(identifier: str, reserved: AbstractSet[str] = RESERVED_WORDS) -> str:
    """
    Return the verbatim form of an identifier that collides with a reserved word.

    Example:
        >>> escape_reserved("event")
        '@event'
        >>> escape_reserved("invoice")
        'invoice'
    """
    if identifier in reserved:
        return VERBATIM_PREFIX + identifier
    return identifier


def strip_suffixes(variable: str, suffixes: List[str]) -> str:
    """
    Remove identifier suffixes in order, each at most once.

    A suffix is only removed when something remains in front of it.
    """
    for suffix in suffixes:
        if variable.endswith(suffix) and len(variable) > len(suffix):
            variable = variable[: -len(suffix)]
    return variable
