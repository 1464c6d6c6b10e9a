"""
advisory/categories.py -- Document category (profile) names and similarity checks.

Any category string that is not one of the known profiles is, by definition,
a csaf_base document. Such free-form names must neither start with "csaf_"
nor be confusable with a known profile once case, whitespace, dashes and
underscores are ignored.
"""

from core.models import CsafVersion

CSAF_BASE = "csaf_base"
CSAF_SECURITY_INCIDENT_RESPONSE = "csaf_security_incident_response"
CSAF_INFORMATIONAL_ADVISORY = "csaf_informational_advisory"
CSAF_SECURITY_ADVISORY = "csaf_security_advisory"
CSAF_VEX = "csaf_vex"
CSAF_DEPRECATED_SECURITY_ADVISORY = "csaf_deprecated_security_advisory"
CSAF_WITHDRAWN = "csaf_withdrawn"
CSAF_SUPERSEDED = "csaf_superseded"

KNOWN_PROFILES: dict[CsafVersion, tuple[str, ...]] = {
    CsafVersion.X20: (
        CSAF_BASE,
        CSAF_SECURITY_INCIDENT_RESPONSE,
        CSAF_INFORMATIONAL_ADVISORY,
        CSAF_SECURITY_ADVISORY,
        CSAF_VEX,
    ),
    CsafVersion.X21: (
        CSAF_BASE,
        CSAF_SECURITY_INCIDENT_RESPONSE,
        CSAF_INFORMATIONAL_ADVISORY,
        CSAF_SECURITY_ADVISORY,
        CSAF_VEX,
        CSAF_DEPRECATED_SECURITY_ADVISORY,
        CSAF_WITHDRAWN,
        CSAF_SUPERSEDED,
    ),
}

# Every category name either schema version reserves.
_RESERVED = frozenset(KNOWN_PROFILES[CsafVersion.X21])

HYPHEN_DASH_CHARACTERS = frozenset(
    "\u002d\u02d7\u05be\u058a\u1400\u1806"
    "\u2010\u2011\u2012\u2013\u2014\u2015\u2043\u2053\u207b\u208b\u2212"
    "\u23af\u23ba\u23bb\u23bc\u23e4"
    "\u2500\u2501\u254c\u254d\u2574\u2576\u2578\u257a"
    "\u2796\u29ff\u2e3a\u2e3b\u301c\ufe58\ufe63\uff0d"
)

UNDERSCORE_CHARACTERS = frozenset(
    "\u005f\u02cd\uff3f\U0001bc96\u0332\u0333\u2017\u203f"
    "\u2581\u23b5\u23bd\ufe4d\ufe4e\ufe4f"
)


def _is_ignored(char: str) -> bool:
    return char.isspace() or char in HYPHEN_DASH_CHARACTERS or char in UNDERSCORE_CHARACTERS


def remove_ignored_chars(value: str) -> str:
    return "".join(c for c in value if not _is_ignored(c))


def normalize_category(category: str) -> str:
    """Lowercase, drop whitespace/dash/underscore variants and a leading 'csaf'.

    >>> normalize_category("Csaf-Security Advisory")
    'securityadvisory'
    """
    normalized = remove_ignored_chars(category.lower())
    if normalized.startswith("csaf"):
        normalized = normalized[len("csaf"):]
    return normalized


def starts_with_csaf_underscore(category: str) -> bool:
    """True if the name reads as 'csaf_' after ignorable leading characters.

    Reserved category names count as starting with 'csaf_' regardless of
    the version being validated.
    """
    if category in _RESERVED:
        return True
    prefix, sep, rest = category.lower().partition("csaf")
    if not sep or not rest:
        return False
    if rest[0] not in UNDERSCORE_CHARACTERS:
        return False
    return remove_ignored_chars(prefix) == ""


def is_known_profile(category: str, version: CsafVersion) -> bool:
    return category in KNOWN_PROFILES[version]


def known_profiles_concat(version: CsafVersion) -> str:
    return ", ".join(KNOWN_PROFILES[version])


class CategoryScope:
    """The document categories a rule applies to, per schema version.

    ``shared`` applies to both versions; ``csaf20`` and ``csaf21`` add
    version specific categories.
    """

    def __init__(
        self,
        shared: tuple[str, ...] = (),
        csaf20: tuple[str, ...] = (),
        csaf21: tuple[str, ...] = (),
    ) -> None:
        self._by_version = {
            CsafVersion.X20: frozenset(shared) | frozenset(csaf20),
            CsafVersion.X21: frozenset(shared) | frozenset(csaf21),
        }

    def applies_to(self, version: CsafVersion, category: str) -> bool:
        return category in self._by_version[version]
