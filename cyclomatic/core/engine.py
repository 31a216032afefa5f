"""
Check engine for the complexity checker.

This module drives the check: it discovers source files, hands each one
to its language front end, runs the complexity pass over the resulting
syntax unit and collects scores and diagnostics.
"""

import os
import time
from pathlib import Path
from typing import List, Dict, Optional, Set, Generator, Union
from concurrent.futures import ThreadPoolExecutor
import fnmatch

from cyclomatic.config import CheckConfig, load_check_config
from cyclomatic.core.complexity import analyze
from cyclomatic.core.errors import AnalysisError
from cyclomatic.core.facts import FactStore, JsonFactStore, MemoryFactStore
from cyclomatic.core.findings import CheckResult, UnitResult
from cyclomatic.logging_config import get_logger
from cyclomatic.parsers import get_parser, list_supported_languages

logger = get_logger(__name__)


# Language detection by file extension
LANGUAGE_EXTENSIONS: Dict[str, List[str]] = {
    "python": [".py", ".pyw", ".pyi"],
    "go": [".go"],
}

# Reverse mapping for quick lookup
EXTENSION_TO_LANGUAGE: Dict[str, str] = {}
for lang, exts in LANGUAGE_EXTENSIONS.items():
    for ext in exts:
        EXTENSION_TO_LANGUAGE[ext] = lang


class CheckEngine:
    """
    Runs the complexity check over files and directories.

    The engine:
    1. Discovers files in the target directory
    2. Detects languages based on file extensions
    3. Parses each file into a syntax unit
    4. Runs one complexity pass per unit
    5. Collects scores, diagnostics and errors

    Units are independent of each other; the fact store is the only state
    they share.
    """

    def __init__(self, config: Optional[CheckConfig] = None, facts: Optional[FactStore] = None):
        self.config = config or CheckConfig()
        self.facts = facts if facts is not None else self._create_fact_store()

        self.limit = self.config.limit
        self.max_file_size = self.config.max_file_size
        self.max_workers = self.config.max_workers
        self.ignore_patterns = self.config.exclude_patterns
        self.include_patterns = self.config.include_patterns
        self.languages = set(self.config.languages or list_supported_languages())

    def _create_fact_store(self) -> FactStore:
        if self.config.facts_path:
            return JsonFactStore(self.config.facts_path)
        return MemoryFactStore()

    def detect_language(self, file_path: str) -> Optional[str]:
        """Detect the programming language of a file."""
        ext = os.path.splitext(file_path)[1].lower()
        language = EXTENSION_TO_LANGUAGE.get(ext)
        if language not in self.languages:
            return None
        return language

    def should_ignore(self, file_path: str, base_path: str) -> bool:
        """Check if a file should be ignored based on patterns."""
        rel_path = os.path.relpath(file_path, base_path)

        for pattern in self.ignore_patterns:
            if fnmatch.fnmatch(rel_path, pattern) or fnmatch.fnmatch(os.path.basename(file_path), pattern):
                return True
            # "dir/**" also matches the directory itself
            if pattern.endswith("/**") and fnmatch.fnmatch(rel_path, pattern[:-3]):
                return True

        return False

    def is_included(self, file_path: str, base_path: str) -> bool:
        if not self.include_patterns:
            return True

        rel_path = os.path.relpath(file_path, base_path)
        for pattern in self.include_patterns:
            if fnmatch.fnmatch(rel_path, pattern) or fnmatch.fnmatch(os.path.basename(file_path), pattern):
                return True
        return False

    def discover_files(self, target_path: str) -> Generator[str, None, None]:
        """Discover all files to check in the target path."""
        target = Path(target_path)

        if target.is_file():
            if self.detect_language(str(target)):
                yield str(target)
            return

        for root, dirs, files in os.walk(target):
            dirs[:] = sorted(d for d in dirs if not self.should_ignore(os.path.join(root, d), target_path))

            for file in sorted(files):
                file_path = os.path.join(root, file)

                if self.should_ignore(file_path, target_path) or not self.is_included(file_path, target_path):
                    continue

                try:
                    if os.path.getsize(file_path) > self.max_file_size:
                        logger.info("skipping %s: larger than %d bytes", file_path, self.max_file_size)
                        continue
                except OSError:
                    continue

                if self.detect_language(file_path):
                    yield file_path

    def read_file(self, file_path: str) -> str:
        """Read a file's contents, dropping a leading byte order mark."""
        with open(file_path, "r", encoding="utf-8-sig", errors="replace") as f:
            return f.read()

    def check_source(self, source: str, language: str, file_path: str = "<stdin>") -> UnitResult:
        """
        Check source code directly without reading from a file.

        Useful for editor integrations and testing.

        Raises:
            AnalysisError: if the unit cannot be parsed or resolved.
        """
        parser = get_parser(language)
        unit = parser.parse(source, file_path)
        result = analyze(unit, self.facts, self.limit)

        return UnitResult(
            file_path=file_path,
            language=unit.language,
            complexities=result.complexities,
            diagnostics=result.diagnostics,
        )

    def check_file(self, file_path: str) -> UnitResult:
        """Check a single file."""
        language = self.detect_language(file_path)
        if not language:
            raise AnalysisError(f"Unsupported file type: {file_path}")

        try:
            source = self.read_file(file_path)
        except OSError as e:
            raise AnalysisError(f"Error reading {file_path}", details={"reason": str(e)}) from e

        return self.check_source(source, language, file_path)

    def _check_file_safely(self, file_path: str) -> Union[UnitResult, AnalysisError]:
        try:
            return self.check_file(file_path)
        except AnalysisError as e:
            logger.error("%s: analysis aborted: %s", file_path, e)
            return e

    def check(self, target_path: str) -> CheckResult:
        """
        Check a target path and return results.

        Args:
            target_path: Path to a file or directory to check.

        Returns:
            CheckResult containing every function's score and the diagnostics.
        """
        start_time = time.time()
        units: List[UnitResult] = []
        errors: List[str] = []
        languages_detected: Set[str] = set()

        files = list(self.discover_files(target_path))
        logger.info("checking %d files under %s", len(files), target_path)

        if len(files) > 1 and self.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                outcomes = list(executor.map(self._check_file_safely, files))
        else:
            outcomes = [self._check_file_safely(f) for f in files]

        for file_path, outcome in zip(files, outcomes):
            if isinstance(outcome, AnalysisError):
                errors.append(f"{file_path}: {outcome}")
                continue
            units.append(outcome)
            languages_detected.add(outcome.language)

        if isinstance(self.facts, JsonFactStore):
            self.facts.save()

        diagnostics = [d for unit in units for d in unit.diagnostics]
        diagnostics.sort(key=lambda d: (d.location.file_path, d.location.start_line, d.location.start_column))

        elapsed_time = time.time() - start_time

        return CheckResult(
            units=units,
            diagnostics=diagnostics,
            files_checked=len(units),
            check_time_seconds=round(elapsed_time, 3),
            languages_detected=sorted(languages_detected),
            errors=errors,
        )


def create_engine(config_path: Optional[str] = None, facts: Optional[FactStore] = None, **overrides) -> CheckEngine:
    """
    Create a check engine with configuration.

    Args:
        config_path: Optional path to a configuration file.
        facts: Optional fact store shared with other engines.
        **overrides: Configuration fields that replace the file's values.

    Returns:
        Configured CheckEngine instance.
    """
    config = load_check_config(config_path) if config_path else CheckConfig()

    if overrides:
        data = config.to_dict()
        data.update(overrides)
        config = CheckConfig.from_dict(data)

    return CheckEngine(config, facts=facts)
