"""
jamforge.generator - Project Generation
=======================================

This module turns a template tree plus variable bindings into a new project
directory, and wires the whole ``jamforge new`` pipeline together.

Architecture
------------
The pipeline has these steps:

    1. Fetch the template tree (bundled or git source)
    2. Load the manifest (``jamforge.toml``)
    3. Collect variables (presets, prompts, defaults)
    4. Walk the template tree and materialize every entry
    5. Initialize a git repository in the new project

Step 4 is :func:`generate_project`. For every path below the template root:

- ignored paths (manifest ``ignore`` list, and the manifest itself) are
  skipped, together with everything below an ignored directory
- each path component is rendered as a file name, so a directory called
  ``{{ crate_name }}`` becomes ``my_service``
- files ending in ``.j2``, or selected by ``should_render``, have their
  content rendered and are written without the ``.j2`` suffix
- all other files are copied byte for byte

Failure Behavior
----------------
:func:`generate_project` is not transactional. If a file fails to render
halfway through, the files written so far stay on disk. :func:`create_project`
is the caller that cleans up: it removes the partial output directory, and
any parent directories it had to create, before re-raising.

Usage Example
-------------
>>> from jamforge.generator import create_project
>>> from jamforge.models import NewProjectRequest
>>>
>>> request = NewProjectRequest(name="my-service", defaults=True, init_git=False)
>>> result = create_project(request, verbose=False)
>>> print(result.project_path)
my-service
"""

from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from types import MappingProxyType
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from jamforge.collector import build_preset, collect_variables
from jamforge.engine import TEMPLATE_SUFFIX, TemplateEngine
from jamforge.errors import (
    OutputExistsError,
    RenderDecodeError,
    RenderError,
    UnsafePathError,
)
from jamforge.models import TemplateManifest
from jamforge.patterns import should_ignore, should_render
from jamforge.sources import BundledTemplateSource, GitTemplateSource


if TYPE_CHECKING:
    from collections.abc import Mapping

    from jamforge.models import NewProjectRequest
    from jamforge.sources import TemplateSource


# =============================================================================
# Module-Level Configuration
# =============================================================================

# Console for rich output
console = Console()

# Rendered path components that would leave their parent directory
UNSAFE_COMPONENTS = frozenset({"", ".", ".."})


# =============================================================================
# Result Data Classes
# =============================================================================

@dataclass
class GenerationResult:
    """
    Result of a project generation run.

    Attributes
    ----------
    project_path : Path
        The output directory.

    directories_created : list[Path]
        Directories created below ``project_path``.

    files_rendered : list[Path]
        Files whose content went through the template engine.

    files_copied : list[Path]
        Files copied unchanged.

    git_initialized : bool
        Whether a git repository was created (set by :func:`create_project`).

    warnings : list[str]
        Non-fatal problems, such as git initialization failing.
    """

    project_path: Path
    directories_created: list[Path] = field(default_factory=list)
    files_rendered: list[Path] = field(default_factory=list)
    files_copied: list[Path] = field(default_factory=list)
    git_initialized: bool = False
    warnings: list[str] = field(default_factory=list)

    @property
    def files_created(self) -> list[Path]:
        """All files written, rendered or copied, sorted by path."""
        return sorted(self.files_rendered + self.files_copied)


# =============================================================================
# Tree Materialization
# =============================================================================

def _raise_walk_error(error: OSError) -> None:
    # os.walk skips unreadable directories unless told otherwise
    raise error


class ProjectGenerator:
    """
    Materializes one template tree into one output directory.

    Parameters
    ----------
    template_root : Path
        Root of the template tree.

    output_root : Path
        Directory to create. Must not exist yet.

    manifest : TemplateManifest
        The template's manifest.

    engine : TemplateEngine | None
        Engine to render with. A new one is created if omitted.
    """

    def __init__(
        self,
        template_root: Path,
        output_root: Path,
        manifest: TemplateManifest,
        engine: TemplateEngine | None = None,
    ) -> None:
        self.template_root = template_root
        self.output_root = output_root
        self.manifest = manifest
        self.engine = engine or TemplateEngine()

    def generate(
        self,
        variables: Mapping[str, str],
        *,
        verbose: bool = False,
    ) -> GenerationResult:
        """
        Walk the template tree and write the project.

        Parameters
        ----------
        variables : Mapping[str, str]
            Bindings. Wrapped in a read-only view for the duration of the run.

        verbose : bool, default=False
            Print every created path.

        Returns
        -------
        GenerationResult
            What was created.

        Raises
        ------
        OutputExistsError
            If ``output_root`` already exists. Nothing is written.
        RenderError
            If a file name or file content fails to render. ``source`` holds
            the template path.
        RenderDecodeError
            If a file selected for rendering is not UTF-8 text.
        UnsafePathError
            If a rendered path component is empty, ``.`` or ``..``, or
            contains a path separator.
        OSError
            On any file system failure, including a directory of the
            template tree that cannot be listed.
        """
        if self.output_root.exists():
            raise OutputExistsError(self.output_root)

        bindings = MappingProxyType(dict(variables))
        result = GenerationResult(project_path=self.output_root)

        self.output_root.mkdir(parents=True)

        walk = os.walk(self.template_root, onerror=_raise_walk_error)
        for dirpath, dirnames, filenames in walk:
            current = Path(dirpath)
            # Sorting in place also fixes the order os.walk descends in
            dirnames.sort()
            filenames.sort()

            kept_dirnames = []
            for dirname in dirnames:
                relative = self._relative(current / dirname)
                if should_ignore(self.manifest, relative):
                    continue
                kept_dirnames.append(dirname)

                output_dir = self.output_root / self._render_path(relative, bindings)
                output_dir.mkdir(parents=True, exist_ok=True)
                result.directories_created.append(output_dir)
                if verbose:
                    console.print(f"  Created {output_dir.relative_to(self.output_root)}/")
            # Pruning dirnames keeps os.walk out of ignored directories
            dirnames[:] = kept_dirnames

            for filename in filenames:
                source_path = current / filename
                relative = self._relative(source_path)
                if should_ignore(self.manifest, relative):
                    continue
                self._materialize_file(source_path, relative, bindings, result, verbose=verbose)

        return result

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.template_root).as_posix()

    def _render_path(self, relative: str, bindings: Mapping[str, str]) -> Path:
        """Render every component of a ``/``-separated relative path."""
        parts = []
        for part in PurePosixPath(relative).parts:
            try:
                rendered = self.engine.render_filename(part, bindings)
            except RenderError as e:
                e.source = relative
                raise
            if rendered in UNSAFE_COMPONENTS or "/" in rendered or "\\" in rendered:
                raise UnsafePathError(
                    f"Path component '{part}' rendered to '{rendered}', "
                    "which is not a plain file name",
                    source=relative,
                )
            parts.append(rendered)
        return Path(*parts)

    def _materialize_file(
        self,
        source_path: Path,
        relative: str,
        bindings: Mapping[str, str],
        result: GenerationResult,
        *,
        verbose: bool,
    ) -> None:
        is_template = source_path.name.endswith(TEMPLATE_SUFFIX)
        output_path = self.output_root / self._render_path(relative, bindings)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        if is_template or should_render(self.manifest, relative):
            if is_template:
                output_path = output_path.with_name(output_path.name[: -len(TEMPLATE_SUFFIX)])

            try:
                content = source_path.read_text(encoding="utf-8")
            except UnicodeDecodeError as e:
                raise RenderDecodeError(
                    "File is not valid UTF-8 text. Binary files are copied only when "
                    "they have no .j2 suffix and the manifest include list skips them",
                    source=relative,
                ) from e
            try:
                rendered = self.engine.render(content, bindings)
            except RenderError as e:
                e.source = relative
                raise

            output_path.write_text(rendered, encoding="utf-8")
            result.files_rendered.append(output_path)
        else:
            shutil.copyfile(source_path, output_path)
            result.files_copied.append(output_path)

        if verbose:
            console.print(f"  Created {output_path.relative_to(self.output_root)}")


def generate_project(
    template_root: Path,
    output_root: Path,
    manifest: TemplateManifest,
    variables: Mapping[str, str],
    *,
    verbose: bool = False,
) -> GenerationResult:
    """
    Materialize ``template_root`` into ``output_root``.

    Convenience wrapper around :class:`ProjectGenerator`; see
    :meth:`ProjectGenerator.generate` for details and errors.
    """
    generator = ProjectGenerator(template_root, output_root, manifest)
    return generator.generate(variables, verbose=verbose)


# =============================================================================
# Git Initialization
# =============================================================================

def init_git_repository(project_dir: Path) -> bool:
    """
    Initialize a git repository in the project directory.

    This function runs `git init` and stages all generated files. No commit
    is created; the first commit is left to the user.

    Parameters
    ----------
    project_dir : Path
        Root directory of the project.

    Returns
    -------
    bool
        True if git initialization succeeded, False otherwise.

    Notes
    -----
    A missing ``git`` executable and a failing git command both yield
    False. :func:`create_project` turns that into a warning on the result.
    """
    try:
        subprocess.run(
            ["git", "init"],
            cwd=project_dir,
            capture_output=True,
            check=True,
        )

        subprocess.run(
            ["git", "add", "."],
            cwd=project_dir,
            capture_output=True,
            check=True,
        )

        return True

    except (subprocess.CalledProcessError, FileNotFoundError):
        return False


# =============================================================================
# Main Generation Function
# =============================================================================

def variables_table(variables: Mapping[str, str]) -> Table:
    """Render the resolved bindings as a two-column table."""
    table = Table(title="Template Variables", show_header=False)
    table.add_column("Variable", style="cyan")
    table.add_column("Value", style="green")

    for key in sorted(variables):
        table.add_row(key, variables[key])

    return table


def topmost_missing(path: Path) -> Path:
    """
    Return the outermost directory that ``mkdir(parents=True)`` would create.

    For ``out/a/b`` where only ``out`` exists this is ``out/a``. For a path
    that already exists it is the path itself.
    """
    missing = path
    for parent in path.parents:
        if parent.exists():
            break
        missing = parent
    return missing


def open_source(request: NewProjectRequest) -> TemplateSource:
    """Pick the template source a request asks for."""
    if request.git is not None:
        return GitTemplateSource(request.git, branch=request.branch, subpath=request.path)
    return BundledTemplateSource(request.template)


def create_project(
    request: NewProjectRequest,
    *,
    verbose: bool = True,
    details: bool = False,
) -> GenerationResult:
    """
    Create a new JAM service project.

    This is the main entry point for project generation. It runs the whole
    pipeline: template fetch, manifest load, variable collection, generation,
    and git initialization.

    Parameters
    ----------
    request : NewProjectRequest
        Validated settings of the run.

    verbose : bool, default=True
        If True, display progress information to the console.

    details : bool, default=False
        If True, also show the resolved variables and every created path.

    Returns
    -------
    GenerationResult
        What was created.

    Raises
    ------
    OutputExistsError
        If the project directory already exists. Checked before the template
        is fetched, and left untouched.
    JamforgeError
        Any other typed failure from the pipeline.

    Notes
    -----
    If generation fails after the project directory was created, the
    partially written directory is removed before the error is re-raised,
    together with any parent directories that did not exist beforehand.
    A directory that appears at the output path while variables are being
    collected belongs to someone else and is never removed.
    """
    project_dir = request.project_dir
    if project_dir.exists():
        raise OutputExistsError(project_dir)

    preset = build_preset(request.defines, request.values_file)

    with open_source(request) as source:
        if verbose:
            console.print("[dim]Fetching template...[/]")
        template_root = source.fetch()

        manifest = TemplateManifest.load(template_root)
        variables = collect_variables(
            manifest,
            preset,
            request.name,
            interactive=not request.defaults,
        )

        if verbose:
            console.print()
            console.print(
                Panel(
                    f"[bold blue]Creating project:[/] [green]{request.name}[/]\n"
                    f"[dim]Template: {manifest.template.name} | "
                    f"Crate: {request.crate_name}[/]",
                    title="[bold]jamforge[/]",
                    border_style="blue",
                )
            )
            if details:
                console.print(variables_table(variables))

        created_root = topmost_missing(project_dir)
        try:
            result = generate_project(
                template_root,
                project_dir,
                manifest,
                variables,
                verbose=verbose and details,
            )
        except OutputExistsError:
            # Not created by this run, so never removed
            raise
        except Exception:
            # Clean up partial project, including parents this run created
            if created_root.exists():
                shutil.rmtree(created_root)
                if verbose:
                    console.print("[dim]Partial project directory was removed.[/]")
            raise

    if request.init_git:
        result.git_initialized = init_git_repository(project_dir)
        if not result.git_initialized:
            result.warnings.append("Git initialization failed (git may not be installed)")

    if verbose:
        console.print()
        console.print(
            Panel(
                f"[bold green]Created JAM service '{request.name}'[/]\n\n"
                f"[dim]Location:[/] {project_dir}\n\n"
                f"[bold]Next steps:[/]\n"
                f"  cd {project_dir}\n"
                f"  cargo build",
                title="[bold green]Success[/]",
                border_style="green",
            )
        )
        for warning in result.warnings:
            console.print(f"  [yellow]⚠[/] {warning}")

    return result
