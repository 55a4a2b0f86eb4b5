"""Global pytest configuration."""

import os

# Keep tests off real services before any imports read settings
os.environ.pop("PLAN_EDITOR_OPENAI_API_KEY", None)
os.environ.pop("PLAN_EDITOR_REDIS_URL", None)
