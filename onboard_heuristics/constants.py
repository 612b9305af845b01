"""Named constants shared across the onboarding heuristics tool."""

# Git ref namespaces
TAG_REF_PREFIX = "refs/tags/"
PEELED_TAG_SUFFIX = "^{}"

# Pattern that matches every path in a tree
MATCH_ALL_PATTERN = "**"

# Input resolution
DEFAULT_PRIORITY = 100

# Heuristics defaults
DEFAULT_PERCENT_SIMILAR = 30
MIN_PERCENT_SIMILAR = 0
MAX_PERCENT_SIMILAR = 100

# Minimum rapidfuzz score (0-100) for a tag to count as a close version
FUZZY_VERSION_SCORE_CUTOFF = 60.0

# Local storage
DEFAULT_REPO_STORAGE = "~/.cache/onboard-heuristics/repos"
REPO_DIR_HASH_LENGTH = 16
LOG_FILE_NAME = "heuristics.log"

# Polling interval (seconds) while waiting on git subprocesses
SUBPROCESS_POLL_INTERVAL = 0.1

# Directory names never considered part of a source tree
IGNORED_DIR_NAMES = frozenset({".git"})
