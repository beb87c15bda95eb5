"""
LendShelf - library book management backend.

Register, list, update and delete books, and lend them out between users.
"""

__version__ = "1.0.0"
