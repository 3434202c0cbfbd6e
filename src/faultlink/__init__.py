"""faultlink: plausibility-driven connections between fault-section clusters.

For every pair of fault-section clusters, finds the section pairs within a
maximum jump distance, probes each with every strand combination against a
chain of plausibility filters, and lets a composable jump selector choose
the single best connection point (or none).
"""
from .faults import FaultSection, FaultSubsectionCluster, Jump, build_clusters
from .ruptures import ClusterRupture
from .plausibility import (
    PlausibilityResult, Range,
    PlausibilityFilter, ScalarValuePlausibilityFilter,
    dist_from_range, is_value_better, find_scalar_filter,
)
from .filters import JumpDistanceFilter, MinSectionsPerParentFilter
from .distances import DistanceProvider, SectionDistanceCalculator
from .settings import SettingsRegistry, DEFAULT_SETTINGS

# Candidate search & selection
from .candidates import CandidateJump, CandidateEvaluator, strands_at
from .selectors import (
    JumpSelector,
    MinDistanceSelector, BestScalarSelector,
    AnyPassMinDistSelector, PassesMinimizeFailedSelector,
    JUMP_SELECTOR_DEFAULT, build_default_selector,
)

# Strategies & diagnostics
from .strategy import (
    ClusterConnectionStrategy,
    PlausibleClusterConnectionStrategy,
    DistCutoffClosestSectStrategy,
    PrecomputedClusterConnectionStrategy,
    default_thread_count, debug_parent_pair,
)
from .trace import ConnectionTrace
from .analysis import JumpComparison, unique_jumps, compare_strategies

__all__ = [
    # Data model
    "FaultSection", "FaultSubsectionCluster", "Jump", "build_clusters",
    "ClusterRupture",
    # Plausibility
    "PlausibilityResult", "Range",
    "PlausibilityFilter", "ScalarValuePlausibilityFilter",
    "dist_from_range", "is_value_better", "find_scalar_filter",
    "JumpDistanceFilter", "MinSectionsPerParentFilter",
    # Distances & settings
    "DistanceProvider", "SectionDistanceCalculator",
    "SettingsRegistry", "DEFAULT_SETTINGS",
    # Candidate search & selection
    "CandidateJump", "CandidateEvaluator", "strands_at",
    "JumpSelector",
    "MinDistanceSelector", "BestScalarSelector",
    "AnyPassMinDistSelector", "PassesMinimizeFailedSelector",
    "JUMP_SELECTOR_DEFAULT", "build_default_selector",
    # Strategies & diagnostics
    "ClusterConnectionStrategy",
    "PlausibleClusterConnectionStrategy",
    "DistCutoffClosestSectStrategy",
    "PrecomputedClusterConnectionStrategy",
    "default_thread_count", "debug_parent_pair",
    "ConnectionTrace",
    "JumpComparison", "unique_jumps", "compare_strategies",
]

__version__ = "0.1.0"
