"""Primary key generation for roles and grants."""

from cuid2 import Cuid

# Role and grant ids are stored in plain String columns; keep them fixed-width.
ID_LENGTH = 24

_generator = Cuid(length=ID_LENGTH)


def generate_cuid() -> str:
    """Return a new CUID2 of ID_LENGTH characters."""
    return _generator.generate()
