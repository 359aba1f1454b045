"""
Hunter Progression Test Suite
=============================

Test Organization
-----------------
- tests/unit/          : Fast unit tests with mocks (no database)
- tests/integration/   : Tests against a real SQLite database (aiosqlite)
- tests/helpers.py     : Database lookups shared by integration tests

Testing Philosophy
------------------
- Unit tests: Fast, isolated, test business logic
- Integration tests: Slower, exercise real transactions and row writes
- Use pytest markers to categorize and selectively run tests
- Follow AAA pattern: Arrange, Act, Assert
"""
