import pytest

from extkit.errors import InvalidIdentifier, InvalidLanguageSelection
from extkit.naming import (
    Language,
    derive_names,
    parse_language,
    substitution_table,
    to_kebab_case,
    validate_identifier,
)


def test_derive_names_for_multi_word_identifier():
    names = derive_names("ProjectMetadataEditor")

    assert names.kebab == "project-metadata-editor"
    assert names.lower == "projectmetadataeditor"
    assert names.package_name == "qupath.ext.projectmetadataeditor"
    assert names.artifact_id == "qupath-extension-project-metadata-editor"
    assert names.module_id == "io.github.qupath.extension.project-metadata-editor"


def test_derive_names_is_deterministic():
    assert derive_names("CellClassifier") == derive_names("CellClassifier")


@pytest.mark.parametrize(
    ("identifier", "expected"),
    [
        ("Analyzer", "analyzer"),
        ("CellClassifier", "cell-classifier"),
        ("Stain2Vector", "stain2-vector"),
        ("HTMLExport", "htmlexport"),
        ("ABCDef", "abcdef"),
    ],
)
def test_kebab_case_only_splits_after_lowercase_or_digit(identifier: str, expected: str):
    assert to_kebab_case(identifier) == expected


@pytest.mark.parametrize("identifier", ["cellClassifier", "Cell-Classifier", "Cell_Classifier", "Cell!", "", "9Lives", "Cell Classifier", "Cell\n"])
def test_validate_identifier_rejects_bad_names(identifier: str):
    with pytest.raises(InvalidIdentifier):
        validate_identifier(identifier)


def test_validate_identifier_accepts_digits_after_first_letter():
    assert validate_identifier("Q2Tools") == "Q2Tools"


@pytest.mark.parametrize(("token", "expected"), [("java", Language.java), ("GROOVY", Language.groovy), (" Both ", Language.both)])
def test_parse_language_is_case_insensitive(token: str, expected: Language):
    assert parse_language(token) is expected


@pytest.mark.parametrize("token", ["kotlin", "", "java,groovy", "javas"])
def test_parse_language_rejects_unknown_tokens(token: str):
    with pytest.raises(InvalidLanguageSelection):
        parse_language(token)


def test_language_inclusion_flags():
    assert Language.java.includes_java and not Language.java.includes_groovy
    assert Language.groovy.includes_groovy and not Language.groovy.includes_java
    assert Language.both.includes_java and Language.both.includes_groovy


def test_substitution_table_puts_coordinates_before_bare_tokens():
    markers = [marker for marker, _ in substitution_table(derive_names("CellClassifier"))]

    assert markers.index("qupath-extension-template") < markers.index("template")
    assert markers.index("io.github.qupath.extension.template") < markers.index("template")
    assert markers.index("qupath.ext.template") < markers.index("template")
    assert markers.index("DemoExtension") < markers.index("Demo")
    assert markers.index("DemoGroovyExtension") < markers.index("Demo")
    assert markers[-1] == "template"
