"""
Core records, mathematical primitives, and invariants.

Everything here is independent of custody, transport, and persistence:
engines consume already-authorized numbers and return new records.
"""
