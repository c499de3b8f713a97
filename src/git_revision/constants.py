"""Constants for git-revision."""

# Published metadata snapshot (inside the package root)
VCS_INFO_FILE = ".vcs_info.json"

# Repository control entry (directory, or file for worktrees/submodules)
GIT_DIR = ".git"

# Configuration file (inside the package root)
CONFIG_FILE = ".git-revision.yaml"

# Generated module
REVISION_CONSTANT = "GIT_REVISION"
REVISION_MODULE = "_revision.py"

DIRTY_SUFFIX = "-dirty"

# Git invocation
DEFAULT_GIT_EXECUTABLE = "git"
DEFAULT_GIT_TIMEOUT = 10.0

# Upper bound on parent-directory ascents when searching for a repository
MAX_ASCENT = 256

# Version
PACKAGE_VERSION = "0.1.0"
