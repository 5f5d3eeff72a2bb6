"""
jamforge.sources - Template Sources
===================================

A template source puts a template tree on local disk and hands back its
root directory. Two sources exist:

- :class:`BundledTemplateSource`: templates shipped inside the package
  (``jamforge/templates/<name>/``)
- :class:`GitTemplateSource`: a template cloned from a git repository,
  optionally from a branch and a subdirectory

Lifetime
--------
Each source owns a temporary directory. The path returned by ``fetch()`` is
only valid until the source is closed, so sources are used as context
managers::

    with BundledTemplateSource("basic-service") as source:
        template_root = source.fetch()
        ...  # generate from template_root

The temporary directory is removed when the ``with`` block exits, whether
generation succeeded or raised.
"""

from __future__ import annotations

import shutil
import subprocess
import tempfile
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING

from jamforge.errors import SourceFetchError, TemplateNotFoundError


if TYPE_CHECKING:
    from importlib.resources.abc import Traversable
    from types import TracebackType


# Shorthand prefix -> repository URL format
URL_SHORTHANDS: dict[str, str] = {
    "gh:": "https://github.com/{}.git",
    "github:": "https://github.com/{}.git",
    "gl:": "https://gitlab.com/{}.git",
    "gitlab:": "https://gitlab.com/{}.git",
    "bb:": "https://bitbucket.org/{}.git",
    "bitbucket:": "https://bitbucket.org/{}.git",
}


# =============================================================================
# Base Class
# =============================================================================

class TemplateSource:
    """
    Base class for template sources.

    Subclasses implement :meth:`_materialize`, which fills a fresh temporary
    directory and returns the template root inside it.
    """

    def __init__(self) -> None:
        self._temp_dir: tempfile.TemporaryDirectory[str] | None = None

    def fetch(self) -> Path:
        """
        Materialize the template tree.

        Returns
        -------
        Path
            Root of the template tree. Valid until :meth:`close`.
        """
        self.close()
        self._temp_dir = tempfile.TemporaryDirectory(prefix="jamforge-")
        try:
            return self._materialize(Path(self._temp_dir.name))
        except BaseException:
            self.close()
            raise

    def close(self) -> None:
        """Delete the temporary directory, if any. Safe to call twice."""
        if self._temp_dir is not None:
            self._temp_dir.cleanup()
            self._temp_dir = None

    def _materialize(self, workdir: Path) -> Path:
        raise NotImplementedError

    def __enter__(self) -> TemplateSource:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


# =============================================================================
# Bundled Templates
# =============================================================================

def bundled_catalog() -> Traversable:
    """Root of the templates shipped with jamforge."""
    return resources.files("jamforge") / "templates"


class BundledTemplateSource(TemplateSource):
    """
    A template shipped inside the jamforge package.

    Parameters
    ----------
    name : str
        Template name, e.g. ``"basic-service"``.

    Examples
    --------
    >>> BundledTemplateSource.available()
    ['basic-service']
    """

    def __init__(self, name: str) -> None:
        super().__init__()
        self.name = name

    @staticmethod
    def available() -> list[str]:
        """Names of all bundled templates, sorted."""
        return sorted(
            entry.name
            for entry in bundled_catalog().iterdir()
            if entry.is_dir() and not entry.name.startswith(("_", "."))
        )

    def _materialize(self, workdir: Path) -> Path:
        if self.name not in self.available():
            raise TemplateNotFoundError(self.name)

        template_root = workdir / self.name
        _extract_tree(bundled_catalog() / self.name, template_root)
        return template_root


def _extract_tree(source: Traversable, dest: Path) -> None:
    """Recreate ``source`` under ``dest``, copying file bytes unchanged."""
    dest.mkdir(parents=True, exist_ok=True)

    for entry in source.iterdir():
        target = dest / entry.name
        if entry.is_dir():
            _extract_tree(entry, target)
        else:
            target.write_bytes(entry.read_bytes())


# =============================================================================
# Git Templates
# =============================================================================

def expand_url(url: str) -> str:
    """
    Expand hosting shorthands to a full clone URL.

    Examples
    --------
    >>> expand_url("gh:owner/repo")
    'https://github.com/owner/repo.git'
    >>> expand_url("https://example.com/repo.git")
    'https://example.com/repo.git'
    """
    for prefix, url_format in URL_SHORTHANDS.items():
        if url.startswith(prefix):
            return url_format.format(url[len(prefix):])
    return url


class GitTemplateSource(TemplateSource):
    """
    A template cloned from a git repository.

    Parameters
    ----------
    url : str
        Clone URL, local path, or shorthand such as ``gh:owner/repo``.

    branch : str | None
        Branch (or tag) to clone. Defaults to the remote HEAD.

    subpath : Path | None
        Directory inside the repository that holds the template.

    Notes
    -----
    The clone is shallow and its ``.git`` directory is deleted afterwards,
    so repository metadata never ends up in a generated project.
    """

    def __init__(
        self,
        url: str,
        branch: str | None = None,
        subpath: Path | None = None,
    ) -> None:
        super().__init__()
        self.url = url
        self.branch = branch
        self.subpath = subpath

    @property
    def clone_url(self) -> str:
        return expand_url(self.url)

    def _materialize(self, workdir: Path) -> Path:
        clone_path = workdir / "repo"
        self._clone(clone_path)

        git_dir = clone_path / ".git"
        if git_dir.exists():
            shutil.rmtree(git_dir)

        if self.subpath is None:
            return clone_path

        template_path = (clone_path / self.subpath).resolve()
        if not template_path.is_relative_to(clone_path.resolve()) or not template_path.is_dir():
            raise TemplateNotFoundError(
                str(self.subpath),
                f"path not found in repository {self.clone_url}",
            )
        return template_path

    def _clone(self, clone_path: Path) -> None:
        url = self.clone_url
        command = ["git", "clone", "--depth", "1"]
        if self.branch:
            command.extend(["--branch", self.branch])
        command.extend([url, str(clone_path)])

        try:
            subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=True,
            )
        except FileNotFoundError as e:
            msg = "Failed to clone repository: git is not installed"
            raise SourceFetchError(msg) from e
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip() or f"git exited with status {e.returncode}"
            msg = f"Failed to clone repository '{url}': {detail}"
            raise SourceFetchError(msg) from e
