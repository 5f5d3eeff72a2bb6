"""
Tests for jamforge.sources
==========================

Bundled and git template sources.

Test Organization
-----------------
- TestBundledTemplateSource: Package-data templates
- TestExpandUrl: Hosting shorthands
- TestGitTemplateSource: Cloning (subprocess mocked)
- TestGitTemplateSourceIntegration: Cloning a real local repository
"""

import shutil
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from jamforge.errors import SourceFetchError, TemplateNotFoundError
from jamforge.models import MANIFEST_FILENAME, TemplateManifest
from jamforge.sources import (
    BundledTemplateSource,
    GitTemplateSource,
    bundled_catalog,
    expand_url,
)


# =============================================================================
# Bundled Template Tests
# =============================================================================

class TestBundledTemplateSource:
    """Tests for BundledTemplateSource."""

    def test_available_lists_basic_service(self) -> None:
        assert "basic-service" in BundledTemplateSource.available()

    def test_available_skips_python_files(self) -> None:
        """The package's own __init__ and caches are not templates."""
        names = BundledTemplateSource.available()
        assert all(not name.startswith(("_", ".")) for name in names)

    def test_fetch_extracts_manifest(self) -> None:
        with BundledTemplateSource("basic-service") as source:
            root = source.fetch()
            manifest = TemplateManifest.load(root)

        assert manifest.template.name == "basic-service"

    def test_extraction_is_byte_identical(self) -> None:
        """Every packaged file is extracted unchanged."""
        packaged = bundled_catalog() / "basic-service" / "src" / "lib.rs.j2"

        with BundledTemplateSource("basic-service") as source:
            root = source.fetch()
            assert (root / "src" / "lib.rs.j2").read_bytes() == packaged.read_bytes()
            assert (root / MANIFEST_FILENAME).is_file()

    def test_close_removes_temp_dir(self) -> None:
        """The extracted tree is gone once the source is closed."""
        source = BundledTemplateSource("basic-service")
        root = source.fetch()
        assert root.exists()

        source.close()
        assert not root.exists()
        source.close()  # second close is a no-op

    def test_context_manager_cleans_up_on_error(self) -> None:
        """The temp dir is removed even when the with block raises."""
        with pytest.raises(RuntimeError):
            with BundledTemplateSource("basic-service") as source:
                root = source.fetch()
                raise RuntimeError("boom")
        assert not root.exists()

    def test_unknown_template(self) -> None:
        with pytest.raises(TemplateNotFoundError, match="no-such-template"):
            with BundledTemplateSource("no-such-template") as source:
                source.fetch()


# =============================================================================
# URL Expansion Tests
# =============================================================================

class TestExpandUrl:
    """Tests for expand_url."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("gh:owner/repo", "https://github.com/owner/repo.git"),
            ("github:owner/repo", "https://github.com/owner/repo.git"),
            ("gl:group/repo", "https://gitlab.com/group/repo.git"),
            ("gitlab:group/repo", "https://gitlab.com/group/repo.git"),
            ("bb:team/repo", "https://bitbucket.org/team/repo.git"),
            ("bitbucket:team/repo", "https://bitbucket.org/team/repo.git"),
        ],
    )
    def test_shorthands(self, url: str, expected: str) -> None:
        assert expand_url(url) == expected

    @pytest.mark.parametrize(
        "url",
        ["https://example.com/repo.git", "git@github.com:owner/repo.git", "/local/path"],
    )
    def test_full_urls_unchanged(self, url: str) -> None:
        assert expand_url(url) == url


# =============================================================================
# Git Template Tests (mocked)
# =============================================================================

def fake_clone(files: dict[str, str]):
    """Build a subprocess.run replacement that writes ``files`` into the clone."""

    def _run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess:
        clone_path = Path(command[-1])
        for relative, content in files.items():
            path = clone_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return subprocess.CompletedProcess(command, 0, "", "")

    return _run


class TestGitTemplateSource:
    """Tests for GitTemplateSource with git mocked out."""

    def test_clone_command(self) -> None:
        """The clone is shallow and uses the expanded URL."""
        with patch("jamforge.sources.subprocess.run", side_effect=fake_clone({})) as mock_run:
            with GitTemplateSource("gh:owner/repo") as source:
                source.fetch()

        command = mock_run.call_args.args[0]
        assert command[:4] == ["git", "clone", "--depth", "1"]
        assert "--branch" not in command
        assert command[4] == "https://github.com/owner/repo.git"

    def test_clone_with_branch(self) -> None:
        with patch("jamforge.sources.subprocess.run", side_effect=fake_clone({})) as mock_run:
            with GitTemplateSource("gh:owner/repo", branch="dev") as source:
                source.fetch()

        command = mock_run.call_args.args[0]
        assert command[4:6] == ["--branch", "dev"]

    def test_git_dir_removed(self) -> None:
        """Repository metadata never reaches the template tree."""
        files = {".git/HEAD": "ref: refs/heads/main\n", MANIFEST_FILENAME: '[template]\nname = "t"\n'}
        with patch("jamforge.sources.subprocess.run", side_effect=fake_clone(files)):
            with GitTemplateSource("gh:owner/repo") as source:
                root = source.fetch()
                assert not (root / ".git").exists()
                assert (root / MANIFEST_FILENAME).is_file()

    def test_subpath(self) -> None:
        files = {"templates/basic/jamforge.toml": '[template]\nname = "basic"\n'}
        with patch("jamforge.sources.subprocess.run", side_effect=fake_clone(files)):
            with GitTemplateSource("gh:o/r", subpath=Path("templates/basic")) as source:
                root = source.fetch()
                assert root.name == "basic"
                assert TemplateManifest.load(root).template.name == "basic"

    def test_missing_subpath(self) -> None:
        with patch("jamforge.sources.subprocess.run", side_effect=fake_clone({"a.txt": "x"})):
            with pytest.raises(TemplateNotFoundError, match="path not found in repository"):
                with GitTemplateSource("gh:o/r", subpath=Path("nope")) as source:
                    source.fetch()

    def test_subpath_escaping_clone(self) -> None:
        """A subpath cannot point outside the cloned repository."""
        with patch("jamforge.sources.subprocess.run", side_effect=fake_clone({"a.txt": "x"})):
            with pytest.raises(TemplateNotFoundError):
                with GitTemplateSource("gh:o/r", subpath=Path("..")) as source:
                    source.fetch()

    def test_clone_failure(self) -> None:
        """git's stderr is carried in the error."""
        error = subprocess.CalledProcessError(128, ["git"], stderr="fatal: repository not found\n")
        with patch("jamforge.sources.subprocess.run", side_effect=error):
            with pytest.raises(SourceFetchError, match="repository not found"):
                with GitTemplateSource("gh:o/missing") as source:
                    source.fetch()

    def test_git_not_installed(self) -> None:
        with patch("jamforge.sources.subprocess.run", side_effect=FileNotFoundError("git")):
            with pytest.raises(SourceFetchError, match="git is not installed"):
                with GitTemplateSource("gh:o/r") as source:
                    source.fetch()

    def test_temp_dir_removed_after_failure(self) -> None:
        """A failed fetch leaves no temporary directory behind."""
        source = GitTemplateSource("gh:o/r")
        with patch("jamforge.sources.subprocess.run", side_effect=FileNotFoundError("git")):
            with pytest.raises(SourceFetchError):
                source.fetch()
        assert source._temp_dir is None


# =============================================================================
# Git Template Tests (real git)
# =============================================================================

@pytest.mark.integration
@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
class TestGitTemplateSourceIntegration:
    """Clone a repository created on the fly."""

    @pytest.fixture
    def template_repo(self, tmp_path: Path) -> Path:
        repo = tmp_path / "repo"
        template = repo / "templates" / "mini"
        template.mkdir(parents=True)
        (template / MANIFEST_FILENAME).write_text('[template]\nname = "mini"\n')
        (template / "hello.txt.j2").write_text("hello {{ project_name }}\n")

        git = ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com"]
        subprocess.run([*git, "init", "-q", "-b", "main"], cwd=repo, check=True)
        subprocess.run([*git, "add", "."], cwd=repo, check=True)
        subprocess.run([*git, "commit", "-q", "-m", "init"], cwd=repo, check=True)
        return repo

    def test_clone_local_repository(self, template_repo: Path) -> None:
        source = GitTemplateSource(
            template_repo.as_uri(), branch="main", subpath=Path("templates/mini")
        )
        with source:
            root = source.fetch()
            assert (root / "hello.txt.j2").read_text() == "hello {{ project_name }}\n"
            assert TemplateManifest.load(root).template.name == "mini"

    def test_unknown_branch(self, template_repo: Path) -> None:
        with pytest.raises(SourceFetchError):
            with GitTemplateSource(template_repo.as_uri(), branch="nope") as source:
                source.fetch()
