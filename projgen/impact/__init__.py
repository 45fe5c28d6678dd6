"""Impact analysis: map a source control change to the affected targets."""

from .engine import ImpactAnalyzer, ImpactResult
from .git import DiffFilter, GitClient
from .glob import PatternCache, glob_to_regex
from .lockfile import Lockfile, changed_pods
from .pruning import prune_unaffected, shared_test_hosts
from .symlinks import SymlinksFinder, expand_with_symlinks

__all__ = [
    "DiffFilter",
    "GitClient",
    "ImpactAnalyzer",
    "ImpactResult",
    "Lockfile",
    "PatternCache",
    "SymlinksFinder",
    "changed_pods",
    "expand_with_symlinks",
    "glob_to_regex",
    "prune_unaffected",
    "shared_test_hosts",
]
