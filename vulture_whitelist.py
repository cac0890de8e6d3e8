"""Vulture whitelist — references that appear unused but are called dynamically.

Vulture scans for unreachable code.  Items listed here are known false
positives: entry points invoked by console_scripts and pytest fixtures
consumed via dependency injection.

Usage:
    uv run vulture coinfolio tests vulture_whitelist.py
"""

# ── Entry points (called by console_scripts, not imported) ──
from coinfolio.main import main  # noqa: F401

# ── Pytest fixtures (injected by pytest, never called directly) ──
from tests.conftest import bitcoin  # noqa: F401
from tests.conftest import db  # noqa: F401
from tests.conftest import ethereum  # noqa: F401
from tests.conftest import settings  # noqa: F401

# ── Pydantic validators (registered by decorator, called by pydantic) ──
from coinfolio.config import Settings  # noqa: E402

Settings.strip_trailing_slash  # noqa: B018
Settings.lowercase_currency  # noqa: B018
Settings.blank_key_is_none  # noqa: B018
Settings.expand_home  # noqa: B018
Settings.model_config  # noqa: B018
