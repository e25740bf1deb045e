"""Tests for the git checkout adapter.

git itself is never invoked: ``subprocess.run`` is patched to return
canned output.
"""

import io
import subprocess
import tarfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from portresolver.adapters.git import GitCheckout
from portresolver.core.errors import CheckoutError

RUN = "portresolver.adapters.git.checkout.subprocess.run"


def completed(stdout: bytes = b"", returncode: int = 0, stderr: bytes = b"") -> MagicMock:
    """Build a fake CompletedProcess."""
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


def make_tar(files: dict[str, str]) -> bytes:
    """Build an in-memory tar archive like ``git archive`` produces."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as tar:
        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


@pytest.fixture
def checkout(tmp_path: Path) -> GitCheckout:
    return GitCheckout(
        root=tmp_path / "repo",
        buildtrees_dir=tmp_path / "buildtrees",
        timeout_seconds=30,
    )


class TestCheckoutPort:
    """Extracting historical port trees."""

    def test_extracts_tree(self, checkout: GitCheckout, tmp_path: Path) -> None:
        archive = make_tar({"vcpkg.json": '{"name": "zlib"}', "patches/fix.patch": "diff"})

        with patch(RUN, return_value=completed(archive)) as run:
            directory = checkout.checkout_port("zlib", "abc123")

        versions_dir = tmp_path / "buildtrees" / "versioning" / "versions"
        assert directory == versions_dir / "zlib" / "abc123"
        assert (directory / "vcpkg.json").read_text() == '{"name": "zlib"}'
        assert (directory / "patches" / "fix.patch").exists()
        command = run.call_args.args[0]
        assert command == [
            "git",
            "-C",
            str(tmp_path / "repo"),
            "archive",
            "--format=tar",
            "abc123",
        ]
        assert run.call_args.kwargs["timeout"] == 30

    def test_reuses_existing_extraction(self, checkout: GitCheckout) -> None:
        archive = make_tar({"vcpkg.json": "{}"})

        with patch(RUN, return_value=completed(archive)) as run:
            first = checkout.checkout_port("zlib", "abc123")
            second = checkout.checkout_port("zlib", "abc123")

        assert first == second
        assert run.call_count == 1

    def test_no_staging_directory_left_behind(self, checkout: GitCheckout) -> None:
        with patch(RUN, return_value=completed(make_tar({"CONTROL": "Source: zlib"}))):
            directory = checkout.checkout_port("zlib", "abc123")

        assert [path.name for path in directory.parent.iterdir()] == ["abc123"]

    def test_git_failure(self, checkout: GitCheckout) -> None:
        failure = completed(returncode=128, stderr=b"fatal: not a tree object")

        with patch(RUN, return_value=failure):
            with pytest.raises(CheckoutError, match="not a tree object"):
                checkout.checkout_port("zlib", "badc0de")

    def test_invalid_archive(self, checkout: GitCheckout) -> None:
        with patch(RUN, return_value=completed(b"not a tar archive")):
            with pytest.raises(CheckoutError, match="failed to extract"):
                checkout.checkout_port("zlib", "abc123")

        assert not (checkout.versioning_dir / "versions" / "zlib" / "abc123").exists()

    def test_timeout(self, checkout: GitCheckout) -> None:
        with patch(RUN, side_effect=subprocess.TimeoutExpired(cmd="git", timeout=30)):
            with pytest.raises(CheckoutError, match="timed out after 30 seconds"):
                checkout.checkout_port("zlib", "abc123")

    def test_missing_git_executable(self, checkout: GitCheckout) -> None:
        with patch(RUN, side_effect=FileNotFoundError("git")):
            with pytest.raises(CheckoutError, match="could not run git"):
                checkout.checkout_port("zlib", "abc123")


class TestCheckoutBaseline:
    """Extracting the baseline document at a commit."""

    def test_writes_baseline(self, checkout: GitCheckout, tmp_path: Path) -> None:
        content = b'{"default": {}}'

        with patch(RUN, return_value=completed(content)) as run:
            path = checkout.checkout_baseline("deadbeef")

        baselines_dir = tmp_path / "buildtrees" / "versioning" / "baselines"
        assert path == baselines_dir / "deadbeef" / "baseline.json"
        assert path.read_bytes() == content
        assert run.call_args.args[0][-2:] == ["show", "deadbeef:port_versions/baseline.json"]

    def test_reuses_existing_baseline(self, checkout: GitCheckout) -> None:
        with patch(RUN, return_value=completed(b"{}")) as run:
            checkout.checkout_baseline("deadbeef")
            checkout.checkout_baseline("deadbeef")

        assert run.call_count == 1

    def test_uses_configured_versions_directory(self, tmp_path: Path) -> None:
        checkout = GitCheckout(
            root=tmp_path, buildtrees_dir=tmp_path / "bt", versions_dir_name="versions"
        )

        with patch(RUN, return_value=completed(b"{}")) as run:
            checkout.checkout_baseline("deadbeef")

        assert run.call_args.args[0][-1] == "deadbeef:versions/baseline.json"

    def test_unknown_commit(self, checkout: GitCheckout) -> None:
        failure = completed(returncode=128, stderr=b"fatal: invalid object name")

        with patch(RUN, return_value=failure):
            with pytest.raises(CheckoutError, match="git show failed"):
                checkout.checkout_baseline("deadbeef")


class TestObjectIds:
    """Only plain object ids reach git or the extraction paths."""

    @pytest.mark.parametrize("git_tree", ["--output=/tmp/x", "../../escape", "HEAD", ""])
    def test_rejects_invalid_git_tree(self, checkout: GitCheckout, git_tree: str) -> None:
        with patch(RUN) as run:
            with pytest.raises(CheckoutError, match="invalid git tree"):
                checkout.checkout_port("zlib", git_tree)

        run.assert_not_called()
        assert not checkout.versioning_dir.exists()

    @pytest.mark.parametrize("port_name", ["../zlib", "zlib/..", "-zlib"])
    def test_rejects_invalid_port_name(self, checkout: GitCheckout, port_name: str) -> None:
        with patch(RUN) as run:
            with pytest.raises(CheckoutError, match="invalid port name"):
                checkout.checkout_port(port_name, "abc123")

        run.assert_not_called()

    @pytest.mark.parametrize("commit", ["--upload-pack=touch", "../..", "main~1"])
    def test_rejects_invalid_commit(self, checkout: GitCheckout, commit: str) -> None:
        with patch(RUN) as run:
            with pytest.raises(CheckoutError, match="invalid commit"):
                checkout.checkout_baseline(commit)

        run.assert_not_called()
