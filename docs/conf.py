"""Sphinx configuration for the Account Registry API reference."""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

project = "Account Registry"
author = "Platform Team"
release = "0.1.0"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx_autodoc_typehints",
]

# the reference builds without a database driver or bcrypt installed
autodoc_mock_imports = ["pymongo", "bson", "bcrypt", "email_validator"]
autodoc_member_order = "bysource"
autodoc_typehints = "description"

exclude_patterns = ["_build"]
html_theme = "alabaster"
