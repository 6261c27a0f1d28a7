from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from .errors import InvalidIdentifier, InvalidLanguageSelection

ARTIFACT_PREFIX = "qupath-extension-"
PACKAGE_PREFIX = "qupath.ext."
MODULE_PREFIX = "io.github.qupath.extension."

TEMPLATE_ARTIFACT_ID = ARTIFACT_PREFIX + "template"
TEMPLATE_MODULE_ID = MODULE_PREFIX + "template"
TEMPLATE_PACKAGE = PACKAGE_PREFIX + "template"

IDENTIFIER_RE = re.compile(r"^[A-Z][A-Za-z0-9]*$")
_WORD_BOUNDARY_RE = re.compile(r"([a-z0-9])([A-Z])")


class Language(str, Enum):
    java = "java"
    groovy = "groovy"
    both = "both"

    @property
    def includes_java(self) -> bool:
        return self in (Language.java, Language.both)

    @property
    def includes_groovy(self) -> bool:
        return self in (Language.groovy, Language.both)


@dataclass(frozen=True)
class DerivedNames:
    identifier: str
    kebab: str
    lower: str
    package_name: str
    artifact_id: str
    module_id: str


def validate_identifier(value: str) -> str:
    if not IDENTIFIER_RE.fullmatch(value):
        raise InvalidIdentifier(
            f"Invalid extension name '{value}': must start with an uppercase letter "
            "and contain only letters and digits"
        )
    return value


def parse_language(value: str) -> Language:
    token = value.strip().lower()
    try:
        return Language(token)
    except ValueError:
        valid = ", ".join(item.value for item in Language)
        raise InvalidLanguageSelection(f"Invalid language '{value}'. Must be one of: {valid}") from None


def to_kebab_case(name: str) -> str:
    """``ProjectMetadataEditor`` -> ``project-metadata-editor``."""
    return _WORD_BOUNDARY_RE.sub(r"\1-\2", name).lower()


def derive_names(identifier: str) -> DerivedNames:
    kebab = to_kebab_case(identifier)
    lower = identifier.lower()
    return DerivedNames(
        identifier=identifier,
        kebab=kebab,
        lower=lower,
        package_name=PACKAGE_PREFIX + lower,
        artifact_id=ARTIFACT_PREFIX + kebab,
        module_id=MODULE_PREFIX + kebab,
    )


def substitution_table(names: DerivedNames) -> tuple[tuple[str, str], ...]:
    # Longer coordinates must be consumed before the bare tokens they contain.
    return (
        (TEMPLATE_ARTIFACT_ID, names.artifact_id),
        (TEMPLATE_MODULE_ID, names.module_id),
        (TEMPLATE_PACKAGE, names.package_name),
        ("DemoExtension", f"{names.identifier}Extension"),
        ("DemoGroovyExtension", f"{names.identifier}GroovyExtension"),
        ("Demo", names.identifier),
        ("Template", names.identifier),
        ("template", names.lower),
    )
