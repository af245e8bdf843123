from __future__ import annotations

import pytest
from fakes import make_settings

from chaincompare.config import Settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()
