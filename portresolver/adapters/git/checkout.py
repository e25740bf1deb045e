"""Git checkout adapter.

Implements CheckoutPort by extracting content from the registry's git
repository into the buildtrees directory:

- baselines: ``<buildtrees>/versioning/baselines/<commit>/baseline.json``
- port trees: ``<buildtrees>/versioning/versions/<port>/<git tree>/``

Extracted content is immutable for a given commit or tree, so an
existing extraction is reused without invoking git. Commits and git
trees must be hexadecimal object ids.
"""

import io
import logging
import re
import shutil
import subprocess
import tarfile
from pathlib import Path

from portresolver.core.errors import CheckoutError
from portresolver.core.ports import CheckoutPort

logger = logging.getLogger(__name__)

_OBJECT_ID = re.compile(r"[0-9a-fA-F]{4,64}")
_PORT_NAME = re.compile(r"[a-z0-9]+(-[a-z0-9]+)*")


def _require(pattern: re.Pattern[str], operation: str, kind: str, value: str) -> None:
    """Reject values that git could read as options or that escape the extraction root."""
    if not pattern.fullmatch(value):
        raise CheckoutError(operation, f"invalid {kind}: {value!r}")


class GitCheckout(CheckoutPort):
    """Materializes baselines and port trees with the git CLI."""

    def __init__(
        self,
        root: Path,
        buildtrees_dir: Path,
        git_executable: str = "git",
        timeout_seconds: int = 120,
        versions_dir_name: str = "port_versions",
    ):
        """Initialize the git checkout adapter.

        Args:
            root: Root of the git repository holding the registry.
            buildtrees_dir: Directory under which extractions are stored.
            git_executable: Name or path of the git executable.
            timeout_seconds: Timeout for each git invocation.
            versions_dir_name: Repository-relative directory of version documents.
        """
        self.root = root
        self.versioning_dir = buildtrees_dir / "versioning"
        self.git_executable = git_executable
        self.timeout_seconds = timeout_seconds
        self.versions_dir_name = versions_dir_name

    def _run_git(self, operation: str, *args: str) -> bytes:
        """Run a git command against the repository and return its stdout."""
        command = [self.git_executable, "-C", str(self.root), *args]
        logger.debug(f"Running {' '.join(command)}")
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired as e:
            raise CheckoutError(
                operation, f"timed out after {self.timeout_seconds} seconds"
            ) from e
        except OSError as e:
            raise CheckoutError(operation, f"could not run {self.git_executable}: {e}") from e

        if result.returncode != 0:
            error_output = result.stderr.decode("utf-8", errors="replace").strip()
            raise CheckoutError(operation, error_output or f"exit code {result.returncode}")
        return result.stdout

    def checkout_baseline(self, commit: str) -> Path:
        _require(_OBJECT_ID, "show", "commit", commit)
        destination = self.versioning_dir / "baselines" / commit / "baseline.json"
        if destination.exists():
            return destination

        content = self._run_git(
            "show", "show", f"{commit}:{self.versions_dir_name}/baseline.json"
        )

        destination.parent.mkdir(parents=True, exist_ok=True)
        staging = destination.with_suffix(".json.tmp")
        staging.write_bytes(content)
        staging.replace(destination)

        logger.info(f"Checked out baseline {commit}", extra={"path": str(destination)})
        return destination

    def checkout_port(self, port_name: str, git_tree: str) -> Path:
        _require(_PORT_NAME, "archive", "port name", port_name)
        _require(_OBJECT_ID, "archive", "git tree", git_tree)
        destination = self.versioning_dir / "versions" / port_name / git_tree
        if destination.exists():
            return destination

        archive = self._run_git("archive", "archive", "--format=tar", git_tree)

        staging = destination.with_name(f"{git_tree}.tmp")
        if staging.exists():
            shutil.rmtree(staging)
        staging.mkdir(parents=True)
        try:
            with tarfile.open(fileobj=io.BytesIO(archive), mode="r:") as tar:
                tar.extractall(staging, filter="data")
        except (tarfile.TarError, OSError) as e:
            shutil.rmtree(staging, ignore_errors=True)
            raise CheckoutError("archive", f"failed to extract tree {git_tree}: {e}") from e
        staging.replace(destination)

        logger.info(
            f"Checked out {port_name} tree {git_tree}",
            extra={"port_name": port_name, "path": str(destination)},
        )
        return destination
