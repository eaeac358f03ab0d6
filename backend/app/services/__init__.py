"""Services Layer — imperative shell around the pure core.

Invariants:
    - Services own IO (DB sessions, files, HTTP, timers); rules live in core/
"""
