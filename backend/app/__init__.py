"""Birthday Wish Application Package — shareable birthday greeting pages.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
