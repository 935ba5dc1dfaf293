from __future__ import annotations

import dataclasses
import fnmatch
import glob
import logging
import re
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from tqdm import tqdm

from .errors import InputError, ParseError
from .loader import discover_parser_plugins, discover_rules
from .models import FileResult, RuleConfig, RunResult, SourceLine, Violation
from .utils import iter_lines
from ..parsers.base import ParserPlugin
from ..parsers.stata import classify_lines
from ..rules.base import PARSE_ERROR_ID, Rule


DEFAULT_LOGGER_NAME = "dolint"
SLOW_CHECK_THRESHOLD_SECONDS = 2.0
GLOB_CHARS = re.compile(r"[*?\[]")
PRAGMA_RE = re.compile(r"dolint:\s*disable=([\w\-, ]+)", re.IGNORECASE)


def configure_logging(verbose: bool = False, logger_name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """Configure and return the package logger.

    This helper ensures the checker has a configured logger even in script usage
    where ``logging.basicConfig`` was not called. ``verbose`` elevates the log
    level to INFO.
    """

    logger = logging.getLogger(logger_name)
    level = logging.INFO if verbose else logging.WARNING
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s - %(message)s")
        )
        logger.addHandler(handler)

    return logger


def collect_lines(source: Iterable[SourceLine]) -> Tuple[Tuple[SourceLine, ...], Optional[ParseError]]:
    """Drain the line reader, keeping the lines read before a ParseError."""
    lines: List[SourceLine] = []
    try:
        for line in source:
            lines.append(line)
    except ParseError as exc:
        return tuple(lines), exc
    return tuple(lines), None


def suppressed_rules(lines: Sequence[SourceLine]) -> Dict[int, Set[str]]:
    """Rule ids disabled per line by a `// dolint: disable=...` comment."""
    pragmas: Dict[int, Set[str]] = {}
    for line in lines:
        if "dolint" not in line.text:
            continue
        m = PRAGMA_RE.search(line.comment_text())
        if m:
            pragmas[line.number] = {t.strip().lower() for t in m.group(1).split(",") if t.strip()}
    return pragmas


def check_lines(
    lines: Sequence[SourceLine],
    config: RuleConfig,
    rules: Dict[str, Rule],
    *,
    path: Optional[Path] = None,
    parse_error: Optional[ParseError] = None,
    logger: Optional[logging.Logger] = None,
) -> List[Violation]:
    """Run every enabled rule over classified lines and return sorted violations."""
    log = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
    found: List[Violation] = []
    for rule in rules.values():
        if not config.is_enabled(rule.id):
            continue
        if rule.scope == "file":
            # file rules report on line 1, which an empty file does not have
            if path is None or not lines:
                continue
            target = path
        else:
            target = lines
        try:
            found.extend(rule.check(target, config))
        except Exception:
            log.exception("Rule %s failed on %s", rule.id, path or "<text>")
            raise

    pragmas = suppressed_rules(lines)
    if pragmas:
        found = [
            v for v in found
            if not ({v.rule_id, "all"} & pragmas.get(v.line, set()))
        ]

    if parse_error is not None:
        found.append(
            Violation(
                rule_id=PARSE_ERROR_ID,
                line=parse_error.line,
                message=str(parse_error),
                severity="error",
                column=parse_error.column,
            )
        )

    if path is not None:
        found = [dataclasses.replace(v, path=str(path)) for v in found]
    return sorted(found, key=Violation.sort_key)


def check_text(
    text: str,
    config: Optional[RuleConfig] = None,
    rules: Optional[Dict[str, Rule]] = None,
    *,
    path: Optional[Path] = None,
) -> List[Violation]:
    """Check in-memory do-file text."""
    lines, parse_error = collect_lines(classify_lines(iter_lines(text)))
    return check_lines(
        lines,
        config or RuleConfig(),
        rules if rules is not None else discover_rules(),
        path=path,
        parse_error=parse_error,
    )


def _choose_parser(parser_plugins: Dict[str, ParserPlugin], path: Path) -> ParserPlugin:
    ext = path.suffix.lower().lstrip(".")
    for plugin in parser_plugins.values():
        if ext in plugin.SUPPORTED_EXTENSIONS:
            return plugin
    # files named explicitly are read as do-files whatever their extension
    return parser_plugins.get("stata", next(iter(parser_plugins.values())))


class FileChecker:
    def __init__(
        self,
        file_path: Path,
        config: RuleConfig,
        *,
        parser_plugins: Optional[Dict[str, ParserPlugin]] = None,
        rules: Optional[Dict[str, Rule]] = None,
        logger: Optional[logging.Logger] = None,
        verbose: bool = False,
    ) -> None:
        self.file_path = file_path
        self.config = config
        self.parser_plugins = parser_plugins or discover_parser_plugins()
        self.rules = rules if rules is not None else discover_rules()
        base_logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
        self.logger = base_logger.getChild(self.__class__.__name__.lower())
        self.verbose = verbose
        if verbose:
            self.logger.setLevel(logging.INFO)

    def check(self) -> FileResult:
        parser = _choose_parser(self.parser_plugins, self.file_path)
        try:
            lines, parse_error = collect_lines(
                parser.parse(self.file_path, max_bytes=self.config.max_file_size)
            )
        except InputError as exc:
            self.logger.warning("Skipping %s: %s", self.file_path, exc.reason)
            return FileResult(path=self.file_path, error=exc.reason)

        if parse_error is not None:
            self.logger.info("Parse error in %s: %s", self.file_path, parse_error)

        violations = check_lines(
            lines,
            self.config,
            self.rules,
            path=self.file_path,
            parse_error=parse_error,
            logger=self.logger,
        )
        return FileResult(path=self.file_path, violations=violations)


class PathChecker:
    """Check every file named by a list of paths, directories and glob patterns."""

    def __init__(
        self,
        targets: Sequence[str],
        config: RuleConfig,
        *,
        parser_plugins: Optional[Dict[str, ParserPlugin]] = None,
        rules: Optional[Dict[str, Rule]] = None,
        workers: int = 8,
        logger: Optional[logging.Logger] = None,
        verbose: bool = False,
        show_progress: bool = True,
        progress_desc: str = "Checking files",
    ) -> None:
        self.targets = list(targets)
        self.config = config
        self.parser_plugins = parser_plugins or discover_parser_plugins()
        self.rules = rules if rules is not None else discover_rules()
        self.workers = max(1, workers)
        base_logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
        self.base_logger = base_logger
        self.logger = base_logger.getChild(self.__class__.__name__.lower())
        self.verbose = verbose
        if verbose:
            self.logger.setLevel(logging.INFO)
        self.show_progress = bool(show_progress)
        self.progress_desc = progress_desc
        self._progress_bar = None
        self._progress_lock = threading.Lock()
        self._slow_log_threshold = SLOW_CHECK_THRESHOLD_SECONDS

    def _is_excluded(self, path: Path, root: Path) -> bool:
        try:
            parts = path.relative_to(root).parts[:-1]
        except ValueError:
            parts = path.parts[:-1]
        return any(part in self.config.exclude for part in parts)

    def _iter_directory(self, root: Path) -> Iterator[Path]:
        for p in sorted(root.rglob("*")):
            if p.is_dir() or self._is_excluded(p, root):
                continue
            if any(fnmatch.fnmatch(p.name, pat) for pat in self.config.include):
                yield p

    def iter_files(self) -> Iterator[Path]:
        """Expand targets; missing files are yielded so they surface as input errors."""
        seen: Set[str] = set()
        for target in self.targets:
            p = Path(target)
            if p.is_dir():
                candidates: Iterable[Path] = self._iter_directory(p)
            elif p.exists() or not GLOB_CHARS.search(target):
                candidates = [p]
            else:
                matches = sorted(glob.glob(target, recursive=True))
                if not matches:
                    self.logger.warning("No files match pattern %s", target)
                expanded: List[Path] = []
                for match in matches:
                    mp = Path(match)
                    if mp.is_dir():
                        expanded.extend(self._iter_directory(mp))
                    elif any(fnmatch.fnmatch(mp.name, pat) for pat in self.config.include):
                        expanded.append(mp)
                candidates = expanded
            for candidate in candidates:
                key = str(candidate)
                if key not in seen:
                    seen.add(key)
                    yield candidate

    def check(self) -> RunResult:
        files = list(self.iter_files())
        total_files = len(files)

        if self.verbose:
            self.logger.info("Discovered %d file(s) to check", total_files)

        if not total_files:
            return RunResult(files=())

        progress_bar = None
        if self.show_progress:
            progress_bar = tqdm(total=total_files, desc=self.progress_desc, unit="file")

        results: List[FileResult] = []
        executor = ThreadPoolExecutor(max_workers=self.workers)
        try:
            self._progress_bar = progress_bar
            futures = {executor.submit(self._check_file, path): path for path in files}
            for future in as_completed(futures):
                path = futures[future]
                try:
                    results.append(future.result())
                except Exception as exc:
                    self.logger.exception("Error checking %s", path)
                    results.append(FileResult(path=path, error=f"internal error: {exc}"))
                finally:
                    if progress_bar is not None:
                        progress_bar.update(1)
        except KeyboardInterrupt:
            if self.verbose:
                self.logger.info("Check interrupted by user; shutting down workers")
            raise
        finally:
            executor.shutdown(wait=True, cancel_futures=True)
            if progress_bar is not None:
                progress_bar.close()
            self._progress_bar = None

        results.sort(key=lambda r: str(r.path))
        return RunResult(files=tuple(results))

    def _check_file(self, path: Path) -> FileResult:
        display_path = str(path)
        self._update_current_file_display(display_path)
        start_time = time.perf_counter()
        checker = FileChecker(
            path,
            self.config,
            parser_plugins=self.parser_plugins,
            rules=self.rules,
            logger=self.base_logger,
            verbose=self.verbose,
        )
        result = checker.check()
        self._maybe_log_slow_file(display_path, time.perf_counter() - start_time, result)
        return result

    def _update_current_file_display(self, display_path: str) -> None:
        label = display_path
        if len(label) > 60:
            label = f"...{label[-57:]}"
        if self._progress_bar is not None:
            with self._progress_lock:
                self._progress_bar.set_postfix_str(label, refresh=False)
                self._progress_bar.refresh()
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug("Processing %s (rules=%d)", display_path, len(self.rules))
        elif self.verbose:
            self.logger.info("Processing %s", display_path)

    def _maybe_log_slow_file(self, display_path: str, duration: float, result: FileResult) -> None:
        if not self.logger.isEnabledFor(logging.DEBUG):
            return
        if duration < self._slow_log_threshold:
            return

        reason = "many violations" if len(result.violations) >= 1_000 else "reader workload"

        self.logger.debug(
            "Slow check for %s took %.2fs (%s). violations=%d, rules=%d",
            display_path,
            duration,
            reason,
            len(result.violations),
            len(self.rules),
        )
