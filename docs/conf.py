# Configuration file for the Sphinx documentation builder.
# https://www.sphinx-doc.org/en/master/usage/configuration.html

import os
import sys
from datetime import datetime

# -- Path setup --------------------------------------------------------------
sys.path.insert(0, os.path.abspath("../src"))

# -- Project information -----------------------------------------------------
project = "betaeta-core"
author = "betaeta-core maintainers"
copyright = f"{datetime.now().year}, {author}"
release = "0.1.0"
version = "0.1"

# -- General configuration ---------------------------------------------------
extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.napoleon",
    "sphinx.ext.viewcode",
    "sphinx.ext.intersphinx",
    "sphinx.ext.mathjax",
    "sphinx.ext.doctest",
    "sphinx_autodoc_typehints",
    # Markdown pages (SPEC_FULL.md, DESIGN.md)
    "myst_nb",
    "sphinx_copybutton",
]

myst_enable_extensions = ["colon_fence", "dollarmath", "deflist"]
nb_execution_mode = "off"

source_suffix = {
    ".rst": "restructuredtext",
    ".md": "myst-nb",
}

master_doc = "index"
exclude_patterns = ["_build", "Thumbs.db", ".DS_Store"]
templates_path = ["_templates"]

# -- Autodoc configuration ---------------------------------------------------
autodoc_default_options = {
    "members": True,
    "member-order": "bysource",
    "undoc-members": True,
    "show-inheritance": True,
}
autodoc_typehints = "description"
autosummary_generate = True

# NumPy style docstrings
napoleon_google_docstring = False
napoleon_numpy_docstring = True
napoleon_use_admonition_for_references = True
napoleon_preprocess_types = True

# -- Options for HTML output -------------------------------------------------
html_theme = "furo"
html_title = "betaeta-core"
html_static_path = ["_static"]

# -- Intersphinx mapping -----------------------------------------------------
intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "numpy": ("https://numpy.org/doc/stable/", None),
    "pandas": ("https://pandas.pydata.org/docs/", None),
    "scipy": ("https://docs.scipy.org/doc/scipy/", None),
}

copybutton_prompt_text = r">>> |\.\.\. |\$ "
copybutton_prompt_is_regexp = True
