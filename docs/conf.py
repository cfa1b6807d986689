"""Sphinx configuration for the NurbSketch documentation."""

from __future__ import annotations

import importlib.util
import sys
import warnings
from datetime import date
from pathlib import Path
from typing import Final

PROJECT_ROOT: Final[Path] = Path(__file__).resolve().parent.parent
SRC_PATH: Final[Path] = PROJECT_ROOT / "src"

sys.path.insert(0, str(SRC_PATH))

nurbsketch_spec = importlib.util.spec_from_file_location(
    "nurbsketch", SRC_PATH / "nurbsketch" / "__init__.py"
)
if nurbsketch_spec is None or nurbsketch_spec.loader is None:
    msg = f"Unable to locate nurbsketch package at {SRC_PATH / 'nurbsketch' / '__init__.py'}"
    raise ImportError(msg)
nurbsketch = importlib.util.module_from_spec(nurbsketch_spec)
sys.modules["nurbsketch"] = nurbsketch
nurbsketch_spec.loader.exec_module(nurbsketch)

project = "NurbSketch"
author = nurbsketch.__author__
copyright = f"{date.today().year}, {author}"  # pylint: disable=redefined-builtin

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.doctest",
    "sphinx.ext.mathjax",
    "sphinx.ext.napoleon",
    "sphinx.ext.viewcode",
    "sphinx.ext.intersphinx",
    "myst_parser",
]

if importlib.util.find_spec("myst_parser") is None:
    warnings.warn("Skipping optional Sphinx extension 'myst_parser': module not found.", stacklevel=1)
    extensions.remove("myst_parser")

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "numpy": ("https://numpy.org/doc/stable", None),
    "numba": ("https://numba.readthedocs.io/en/stable", None),
}

exclude_patterns: list[str] = ["_build", "Thumbs.db", ".DS_Store"]

source_suffix = {
    ".rst": "restructuredtext",
    ".md": "markdown",
}

master_doc = "index"

napoleon_google_docstring = True
napoleon_numpy_docstring = False
napoleon_include_init_with_doc = True
napoleon_attr_annotations = True

autosummary_generate = True
autodoc_typehints = "description"
autodoc_member_order = "bysource"

myst_enable_extensions = [
    "colon_fence",
    "dollarmath",
]

html_theme = "sphinx_rtd_theme"
if importlib.util.find_spec("sphinx_rtd_theme") is None:
    warnings.warn("sphinx_rtd_theme not found. Falling back to 'alabaster'.", stacklevel=1)
    html_theme = "alabaster"

html_theme_options = {
    "collapse_navigation": False,
    "navigation_depth": 3,
}

version = nurbsketch.__version__
release = nurbsketch.__version__
