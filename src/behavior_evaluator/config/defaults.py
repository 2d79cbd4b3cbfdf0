"""Default configuration values for behavior-evaluator.

This module centralizes all hard-coded default values used throughout
the engine, making them easy to discover and modify.
"""

from pathlib import Path

# Session storage
DEFAULT_STORAGE_PATH = Path.home() / ".local" / "share" / "opencode"
DEFAULT_MAX_DELEGATION_DEPTH = 5

# Scoring
DEFAULT_PASS_THRESHOLD = 75.0
DEFAULT_RULE_WEIGHT = 1.0

# Rule tuning
DEFAULT_COMPLEXITY_THRESHOLD = 4
DEFAULT_CONTEXT_PATTERNS = (".opencode/context/", "/context/", "AGENTS.md")

# Batch evaluation
DEFAULT_MAX_CONCURRENCY = 4

# Validation ranges
THRESHOLD_MIN = 0.0
THRESHOLD_MAX = 100.0
MAX_DELEGATION_DEPTH_MIN = 0
MAX_DELEGATION_DEPTH_MAX = 20
MAX_CONCURRENCY_MIN = 1
MAX_CONCURRENCY_MAX = 64

# Tools that spawn a nested (child) session
DELEGATION_TOOLS = frozenset({"task"})
