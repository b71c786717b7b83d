"""
Fixtures for integration tests against a real PostgreSQL.

Requires PostgreSQL to be running (via docker-compose); tests are skipped
otherwise.
"""

import pytest

# Module-level marker for all integration tests
pytestmark = pytest.mark.integration
