"""
Alias pattern construction for controlled-vocabulary labels.

A label such as "Science fiction films" becomes a whole-string,
case-insensitive pattern accepting "science fiction", "sci-fi",
"science fiction film", and so on. Tables are built once before
processing and are read-only afterwards.
"""

import json
import re
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Pattern, Sequence, Tuple

from refminer.models import normalize_text

# (label fragment regex, replacement regex)
SynonymRule = Tuple[str, str]

SCIENCE_FICTION_SYNONYM: SynonymRule = (r"science ?fiction", r"(?:science ?fiction|sci-fi)")
DEFAULT_SYNONYMS: Tuple[SynonymRule, ...] = (SCIENCE_FICTION_SYNONYM,)
DEFAULT_QUALIFIER = "film"


def optional_qualifier(qualifier: str = DEFAULT_QUALIFIER) -> str:
    """Regex for an optional trailing qualifier word, e.g. "(?: film)?"."""
    return f"(?: {re.escape(qualifier)})?"


def build_alias_pattern(
    label: str,
    qualifier: str = DEFAULT_QUALIFIER,
    synonyms: Sequence[SynonymRule] = DEFAULT_SYNONYMS
) -> str:
    """
    Build the regex source for one vocabulary label.

    The qualifier word (singular or plural) becomes optional wherever it
    appears; labels without it get an optional trailing qualifier. Synonym
    fragments are replaced by their alternation. Everything else is literal.

    Args:
        label: Vocabulary label (e.g., "Science fiction films")
        qualifier: Qualifier word made optional
        synonyms: Fragment -> alternation rules

    Returns:
        Regex source, to be used with fullmatch and IGNORECASE

    Example:
        >>> build_alias_pattern("Science fiction films")
        '(?:science ?fiction|sci-fi)(?: film)?'
    """
    qualifier_regex = rf" {re.escape(qualifier)}s?\b"
    fragments = [qualifier_regex] + [fragment for fragment, _ in synonyms]
    splitter = re.compile("(" + "|".join(fragments) + ")", re.IGNORECASE)

    pieces = []
    has_qualifier = False
    for index, part in enumerate(splitter.split(normalize_text(label))):
        if index % 2 == 0:
            pieces.append(re.escape(part))
        elif re.fullmatch(qualifier_regex, part, re.IGNORECASE):
            pieces.append(optional_qualifier(qualifier))
            has_qualifier = True
        else:
            pieces.append(_synonym_replacement(part, synonyms))

    if not has_qualifier:
        pieces.append(optional_qualifier(qualifier))
    return "".join(pieces)


def _synonym_replacement(part: str, synonyms: Sequence[SynonymRule]) -> str:
    for fragment, replacement in synonyms:
        if re.fullmatch(fragment, part, re.IGNORECASE):
            return replacement
    return re.escape(part)


def compile_alias_pattern(label: str, **kwargs) -> Pattern:
    """Compile build_alias_pattern() output case-insensitively."""
    return re.compile(build_alias_pattern(label, **kwargs), re.IGNORECASE)


def alias_matches(pattern: Pattern, value: str) -> bool:
    """Whole-string match of a record value against an alias pattern."""
    return pattern.fullmatch(normalize_text(value)) is not None


def build_alias_table(vocabulary: Mapping[str, str], **kwargs) -> Mapping[str, Pattern]:
    """
    Compile a whole vocabulary.

    Args:
        vocabulary: Term identifier -> label
        **kwargs: Passed to build_alias_pattern

    Returns:
        Read-only mapping term identifier -> compiled pattern
    """
    table = {
        term_id: compile_alias_pattern(label, **kwargs)
        for term_id, label in vocabulary.items()
        if label and label.strip()
    }
    return MappingProxyType(table)


def load_vocabulary(path: str) -> Mapping[str, str]:
    """
    Load a vocabulary from a JSON file of {"term id": "label"}.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a JSON object
    """
    vocabulary_file = Path(path)
    if not vocabulary_file.exists():
        raise FileNotFoundError(f"Vocabulary file not found: {path}")

    with open(vocabulary_file, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Vocabulary file must contain a JSON object: {path}")
    return {str(k): str(v) for k, v in data.items()}
