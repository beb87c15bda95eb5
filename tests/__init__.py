"""
LendShelf Test Suite

Tests are organized into:
- unit/: Repositories, security and middleware
- integration/: HTTP flows through the API
"""
