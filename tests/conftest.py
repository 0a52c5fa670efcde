"""Global test fixtures."""

import os

import logfire

# Set before any test builds a Config: a developer's
# ~/.config/repocache/config.yaml must not leak into tests
os.environ["REPOCACHE_CONFIG_FILE"] = os.devnull

logfire.configure(send_to_logfire=False, console=False)
