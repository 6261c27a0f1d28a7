from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from .errors import ConfigError, InvalidIdentifier, InvalidLanguageSelection
from .naming import parse_language, validate_identifier

SETTINGS_FILE = ".extkit.yml"

TEMPLATE_DIR_SEGMENT = "template"

DEFAULT_NAME = "MyExtension"
DEFAULT_LANGUAGE = "java"
DEFAULT_TOOL_MARKER = "create-extension"

BUILD_DESCRIPTOR = "build.gradle.kts"

COPY_EXCLUDES = ("build", ".gradle", ".git", ".idea", "*.iml", SETTINGS_FILE)

BINARY_SUFFIXES = {".jar", ".class", ".png", ".jpg", ".gif"}
DOC_SUFFIXES = {".md"}
LAUNCHER_SCRIPTS = {"gradlew", "gradlew.bat"}
WRAPPER_JAR = "gradle/wrapper/gradle-wrapper.jar"

MAX_CLEANUP_PASSES = 10
RETRY_ATTEMPTS = 3
RETRY_DELAY = 0.05


@dataclass(frozen=True)
class ScaffoldSettings:
    default_name: str = DEFAULT_NAME
    default_language: str = DEFAULT_LANGUAGE
    tool_marker: str = DEFAULT_TOOL_MARKER
    exclude: tuple[str, ...] = ()


_STRING_KEYS = ("default_name", "default_language", "tool_marker")


def load_settings(template_root: Path) -> ScaffoldSettings:
    """Read ``.extkit.yml`` from the template root, falling back to defaults."""
    marker = template_root / SETTINGS_FILE
    if not marker.is_file():
        return ScaffoldSettings()

    data = yaml.safe_load(marker.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{marker} must contain a mapping")

    unknown = sorted(set(data) - set(_STRING_KEYS) - {"exclude"})
    if unknown:
        raise ConfigError(f"Unknown settings in {marker}: {', '.join(unknown)}")

    values: dict = {}
    for key in _STRING_KEYS:
        if key not in data:
            continue
        value = data[key]
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"Setting '{key}' in {marker} must be a non-empty string")
        values[key] = value.strip()

    exclude = data.get("exclude") or []
    if not isinstance(exclude, list) or not all(isinstance(item, str) for item in exclude):
        raise ConfigError(f"Setting 'exclude' in {marker} must be a list of strings")
    values["exclude"] = tuple(item.strip() for item in exclude if item.strip())

    try:
        if "default_name" in values:
            validate_identifier(values["default_name"])
        if "default_language" in values:
            values["default_language"] = parse_language(values["default_language"]).value
    except (InvalidIdentifier, InvalidLanguageSelection) as error:
        raise ConfigError(f"Invalid setting in {marker}: {error}") from error

    return ScaffoldSettings(**values)
