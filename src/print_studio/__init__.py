"""Top-level package for the weekly report print studio.

Provides subpackages:
- print_studio.core – report and section models, schema validation, serialization
- print_studio.studio – print configuration store (layout intent)
- print_studio.layout – height model and page packing (PageMap)
- print_studio.output – HTML preview and PDF export renderers
- print_studio.persistence – locked JSON storage and debounced auto-save
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text()
            for line in content.splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.3.1"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    # Fallback to importlib.metadata for installed package
    try:
        from importlib.metadata import version as pkg_version
        return pkg_version("print_studio")
    except Exception:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
