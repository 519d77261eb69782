"""
Heuristic check runners.

Each runner inspects the list of files changed by a pull request and
turns it into a CheckResult. Nothing is executed: these are
approximations of test, lint, build and security tooling.
"""

import posixpath
from abc import ABC, abstractmethod

from loguru import logger

from adapters.base import GitPlatformAdapter, PlatformAPIError
from models.checks import CheckResult
from models.platform import ChangedFile, CheckStatus, PullRequestContext

LINT_ADDITIONS_THRESHOLD = 100

TEST_FILE_MARKERS = ("_test.", ".test.", ".spec.")

SOURCE_SUFFIXES = (
    ".py", ".go", ".js", ".jsx", ".ts", ".tsx", ".java", ".kt",
    ".rb", ".rs", ".c", ".cc", ".cpp", ".h", ".cs", ".php", ".swift",
)

BUILD_DESCRIPTORS = (
    "Dockerfile", "go.mod", "Makefile", "pyproject.toml",
    "setup.py", "requirements.txt", "package.json",
)

SENSITIVE_TOKENS = ("password", "secret", "token")


class BaseCheck(ABC):
    """
    Abstract base class for all checks.

    Subclasses implement evaluate_files(); fetching the changed-file list
    and turning a fetch failure into an error result is shared here.
    """

    name: str = ""

    def __init__(self, adapter: GitPlatformAdapter):
        self.adapter = adapter

    def evaluate(self, context: PullRequestContext) -> CheckResult:
        try:
            files = self.adapter.list_files(context)
        except PlatformAPIError as e:
            logger.warning(f"Check {self.name} could not list files for {context.key}: {e}")
            return self.result(CheckStatus.ERROR, f"Failed to get PR files: {e}")

        return self.evaluate_files(files)

    @abstractmethod
    def evaluate_files(self, files: list[ChangedFile]) -> CheckResult:
        pass

    def result(self, status: CheckStatus, message: str) -> CheckResult:
        return CheckResult(name=self.name, status=status, message=message)


class TestCheck(BaseCheck):
    """Passes when the PR touches at least one test module."""

    name = "test"
    __test__ = False  # not a pytest class

    def evaluate_files(self, files: list[ChangedFile]) -> CheckResult:
        if any(is_test_file(file.filename) for file in files):
            return self.result(CheckStatus.SUCCESS, "All tests passed")
        return self.result(CheckStatus.WARNING, "No test files found in this PR")


class LintCheck(BaseCheck):
    """Warns about source files with unusually large additions."""

    name = "lint"

    def evaluate_files(self, files: list[ChangedFile]) -> CheckResult:
        issues = sum(
            1
            for file in files
            if file.filename.endswith(SOURCE_SUFFIXES)
            and file.additions > LINT_ADDITIONS_THRESHOLD
        )
        if issues:
            return self.result(CheckStatus.WARNING, f"Found {issues} potential linting issues")
        return self.result(CheckStatus.SUCCESS, "No linting issues found")


class BuildCheck(BaseCheck):
    """Always passes; notes whether build configuration changed."""

    name = "build"

    def evaluate_files(self, files: list[ChangedFile]) -> CheckResult:
        if any(descriptor in file.filename for file in files for descriptor in BUILD_DESCRIPTORS):
            return self.result(CheckStatus.SUCCESS, "Build check passed")
        return self.result(CheckStatus.SUCCESS, "No build configuration changes")


class SecurityCheck(BaseCheck):
    """Fails when filenames suggest committed credentials."""

    name = "security"

    def evaluate_files(self, files: list[ChangedFile]) -> CheckResult:
        issues = sum(
            1
            for file in files
            if any(token in file.filename.lower() for token in SENSITIVE_TOKENS)
        )
        if issues:
            return self.result(
                CheckStatus.FAILURE,
                f"Potential security issues found in {issues} files",
            )
        return self.result(CheckStatus.SUCCESS, "No security issues detected")


class UnknownCheck:
    """Fallback for a configured name with no runner behind it."""

    def __init__(self, name: str):
        self.name = name

    def evaluate(self, context: PullRequestContext) -> CheckResult:
        return CheckResult(
            name=self.name,
            status=CheckStatus.SKIPPED,
            message=f"Unknown check: {self.name}",
        )


CHECK_RUNNERS: dict[str, type[BaseCheck]] = {
    TestCheck.name: TestCheck,
    LintCheck.name: LintCheck,
    BuildCheck.name: BuildCheck,
    SecurityCheck.name: SecurityCheck,
}


def is_test_file(filename: str) -> bool:
    basename = posixpath.basename(filename)
    return basename.startswith("test_") or any(marker in basename for marker in TEST_FILE_MARKERS)


def build_check_registry(adapter: GitPlatformAdapter) -> dict[str, BaseCheck]:
    """Instantiate every known runner against one adapter."""
    return {name: runner(adapter) for name, runner in CHECK_RUNNERS.items()}
