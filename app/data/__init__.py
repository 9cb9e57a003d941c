"""
Data access layer.

Design rules:
- Views call ONLY functions in this package.
- Reads are wrapped so a backend failure degrades to an empty frame + warning.
- Demo mode reads Faker-generated frames and refuses writes.
- No env var reads here (config-only).
"""
