"""Core type definitions."""

from typing import NewType

# Resolved internal link target (e.g., "/Main_Page", "/Special:MyLanguage/Prayer")
# Distinct from raw outline tokens to catch unresolved values being rendered
LocalPath = NewType("LocalPath", str)
