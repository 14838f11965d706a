"""Build Share Application Package — short-code sharing for character builds.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""

__version__ = "2.0.0"
