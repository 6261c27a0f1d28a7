from __future__ import annotations

from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Iterable, Sequence

from .config import (
    BINARY_SUFFIXES,
    BUILD_DESCRIPTOR,
    DOC_SUFFIXES,
    LAUNCHER_SCRIPTS,
    TEMPLATE_DIR_SEGMENT,
    WRAPPER_JAR,
)
from .naming import DerivedNames, Language


class FileKind(str, Enum):
    binary = "binary-excluded"
    script = "script-excluded"
    gated = "language-gated"
    text = "text-rewritable"


def is_groovy_file(name: str) -> bool:
    return name.endswith(".groovy") or "Groovy" in name


def is_java_file(name: str) -> bool:
    return name.endswith(".java") or ("DemoExtension" in name and "Groovy" not in name)


def classify(relative: PurePosixPath, language: Language, tool_marker: str) -> FileKind:
    name = relative.name
    if (
        relative.suffix.lower() in BINARY_SUFFIXES
        or relative.suffix.lower() in DOC_SUFFIXES
        or name in LAUNCHER_SCRIPTS
        or WRAPPER_JAR in relative.as_posix()
    ):
        return FileKind.binary

    if tool_marker.lower() in name.lower():
        return FileKind.script

    if is_groovy_file(name) and not language.includes_groovy:
        return FileKind.gated
    if is_java_file(name) and not language.includes_java:
        return FileKind.gated

    return FileKind.text


def apply_substitutions(text: str, table: Iterable[tuple[str, str]]) -> tuple[str, bool]:
    matched = False
    for marker, replacement in table:
        if marker in text:
            text = text.replace(marker, replacement)
            matched = True
    return text, matched


def filter_build_descriptor(lines: Sequence[str], language: Language, tool_marker: str) -> list[str]:
    """Drop the scaffolding apply line and, without Groovy, the Groovy plugin and bundle lines.

    The plugin line (a bare ``groovy`` inside ``plugins {}``) also takes a
    directly preceding ``//`` comment with it.
    """
    marker = tool_marker.lower()
    kept: list[str] = []
    for line in lines:
        if marker in line.lower():
            continue
        if not language.includes_groovy:
            if line.strip() == "groovy":
                if kept and kept[-1].strip().startswith("//"):
                    kept.pop()
                continue
            if "groovy" in line.lower():
                continue
        kept.append(line)
    return kept


def rewrite_file(
    path: Path,
    table: Sequence[tuple[str, str]],
    language: Language,
    tool_marker: str,
) -> bool:
    """Rewrite ``path`` in place. Returns ``True`` when the file was written."""
    try:
        content = path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError):
        return False

    modified = False
    if path.name == BUILD_DESCRIPTOR:
        # Line decisions are taken on the template text so that a new name
        # containing "groovy" cannot knock out unrelated lines.
        content = "\n".join(filter_build_descriptor(content.split("\n"), language, tool_marker))
        modified = True

    content, matched = apply_substitutions(content, table)
    modified = modified or matched

    if modified:
        path.write_bytes(content.encode("utf-8"))
    return modified


def renamed_file_name(name: str, names: DerivedNames) -> str:
    if "DemoExtension" in name and "Groovy" not in name:
        return name.replace("DemoExtension", f"{names.identifier}Extension")
    if "DemoGroovyExtension" in name:
        return name.replace("DemoGroovyExtension", f"{names.identifier}GroovyExtension")
    if "Template" in name:
        return name.replace("Template", names.identifier)
    if "template" in name:
        return name.replace("template", names.lower)
    return name


def relocated_path(relative: PurePosixPath, names: DerivedNames) -> PurePosixPath:
    parents = [names.lower if part == TEMPLATE_DIR_SEGMENT else part for part in relative.parts[:-1]]
    return PurePosixPath(*parents, renamed_file_name(relative.name, names))
