import os
import sys

import pytest

# Ensure backend package is importable when running `pytest` from repo root
BASE_DIR = os.path.dirname(__file__)
BACKEND_DIR = os.path.join(BASE_DIR, 'backend')
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)


@pytest.fixture
def seeded_catalog(db):
    """Reference dataset: 3 categories, 25 products, 2 roles, 2 users."""
    from apps.catalog.seed import seed_catalog

    return seed_catalog()
