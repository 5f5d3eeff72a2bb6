"""
jamforge.templates - Bundled Template Catalog
=============================================

Every subdirectory of this package is one bundled template. The directory
name is the template name passed to ``jamforge new --template``.

Template Layout
---------------
Each template directory holds a ``jamforge.toml`` manifest at its root and
the files that make up a generated project:

- Files ending in ``.j2`` are rendered and written without the suffix
- Files matched by the manifest's ``include`` patterns are rendered in place
- Everything else is copied unchanged
- File and directory names may contain ``{{ variable }}`` interpolations

Available Templates
-------------------
basic-service:
    - Cargo.toml.j2: Crate manifest with the JAM PVM dependencies
    - src/lib.rs.j2: Service skeleton implementing ``Service``
    - README.md.j2: Project readme

Template Context
----------------
All templates receive ``project_name`` and ``crate_name`` plus every
placeholder declared in the manifest, all as strings.

See Also
--------
jamforge.sources.BundledTemplateSource : Extracts a template from here
"""
