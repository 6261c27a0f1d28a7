from __future__ import annotations

import os
import shutil
import time
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path, PurePosixPath
from typing import Callable

from .config import COPY_EXCLUDES, MAX_CLEANUP_PASSES, RETRY_ATTEMPTS, RETRY_DELAY, ScaffoldSettings
from .errors import TargetAlreadyExists, TemplateNotFound
from .naming import DerivedNames, Language, derive_names, substitution_table, validate_identifier
from .rewrite import FileKind, classify, relocated_path, rewrite_file


@dataclass(frozen=True)
class ScaffoldOptions:
    identifier: str
    template_root: Path
    language: Language = Language.java
    settings: ScaffoldSettings = field(default_factory=ScaffoldSettings)


@dataclass(frozen=True)
class ScaffoldReport:
    target: Path
    names: DerivedNames
    language: Language
    updated: tuple[str, ...]
    renamed: tuple[tuple[str, str], ...]
    deleted: tuple[str, ...]
    removed_dirs: tuple[str, ...]
    warnings: tuple[str, ...]


def target_directory(template_root: Path, names: DerivedNames) -> Path:
    return template_root.resolve().parent / names.artifact_id


def _relative(path: Path, root: Path) -> str:
    return path.relative_to(root).as_posix()


def _iter_tree_files(root: Path) -> list[Path]:
    files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        files.extend(Path(dirpath) / name for name in sorted(filenames))
    return files


def _retry(operation: Callable[[], object]) -> None:
    # Freshly closed handles can briefly block unlink/rename on some platforms.
    delay = RETRY_DELAY
    for attempt in range(1, RETRY_ATTEMPTS + 1):
        try:
            operation()
            return
        except FileNotFoundError:
            raise
        except OSError:
            if attempt == RETRY_ATTEMPTS:
                raise
            time.sleep(delay)
            delay *= 2


def _copy_template(template_root: Path, target: Path, settings: ScaffoldSettings) -> None:
    root_ignore = shutil.ignore_patterns(*COPY_EXCLUDES, *settings.exclude)

    # Exclusions name build output and tool state at the template root only;
    # nested sources that share those names are copied.
    def ignore(directory: str, names: list[str]) -> set[str]:
        if Path(directory) == template_root:
            return root_ignore(directory, names)
        return set()

    shutil.copytree(template_root, target, ignore=ignore)


def _delete_files(paths: list[Path], root: Path, warnings: list[str]) -> list[str]:
    deleted: list[str] = []
    for path in paths:
        relative = _relative(path, root)
        try:
            _retry(path.unlink)
        except OSError as error:
            warnings.append(f"Could not delete {relative}: {error}")
            continue
        deleted.append(relative)
    return deleted


def _remove_empty_dirs(root: Path, warnings: list[str]) -> list[str]:
    removed: list[str] = []
    failed: set[Path] = set()
    for _ in range(MAX_CLEANUP_PASSES):
        removed_any = False
        for dirpath, _dirnames, _filenames in os.walk(root, topdown=False):
            directory = Path(dirpath)
            if directory == root or directory in failed or any(directory.iterdir()):
                continue
            try:
                _retry(directory.rmdir)
            except OSError as error:
                failed.add(directory)
                warnings.append(f"Could not remove empty dir {_relative(directory, root)}: {error}")
                continue
            removed.append(_relative(directory, root))
            removed_any = True
        if not removed_any:
            break
    return removed


def scaffold_extension(options: ScaffoldOptions) -> ScaffoldReport:
    """Copy the template next to itself and turn it into a named extension.

    Stages run strictly in order: copy, rewrite and relocate every file,
    delete files of unselected languages, then drop empty directories.
    Nothing is rolled back when a later stage fails.
    """
    names = derive_names(validate_identifier(options.identifier))
    settings = options.settings

    template_root = options.template_root.resolve()
    if not template_root.is_dir():
        raise TemplateNotFound(f"Template directory does not exist: {template_root}")

    target = target_directory(template_root, names)
    if target.exists() or target.is_symlink():
        raise TargetAlreadyExists(f"Target directory already exists: {target}")

    _copy_template(template_root, target, settings)

    table = substitution_table(names)
    updated: list[str] = []
    renamed: list[tuple[str, str]] = []
    to_delete: list[Path] = []

    for path in _iter_tree_files(target):
        relative = PurePosixPath(_relative(path, target))
        kind = classify(relative, options.language, settings.tool_marker)
        if kind in (FileKind.binary, FileKind.script):
            continue
        if kind == FileKind.gated:
            to_delete.append(path)
            continue

        if rewrite_file(path, table, options.language, settings.tool_marker):
            updated.append(relative.as_posix())

        new_relative = relocated_path(relative, names)
        if new_relative != relative:
            destination = target.joinpath(*new_relative.parts)
            destination.parent.mkdir(parents=True, exist_ok=True)
            _retry(partial(os.replace, path, destination))
            renamed.append((relative.as_posix(), new_relative.as_posix()))

    warnings: list[str] = []
    deleted = _delete_files(to_delete, target, warnings)
    removed_dirs = _remove_empty_dirs(target, warnings)

    return ScaffoldReport(
        target=target,
        names=names,
        language=options.language,
        updated=tuple(updated),
        renamed=tuple(renamed),
        deleted=tuple(deleted),
        removed_dirs=tuple(removed_dirs),
        warnings=tuple(warnings),
    )
