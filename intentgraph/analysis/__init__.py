"""Analysis, validation and optimization of intent graphs."""

from intentgraph.analysis.validator import (
    ValidationIssue,
    ValidationReport,
    validate_graph,
)
from intentgraph.analysis.complexity import (
    ComplexityMetrics,
    ResourceEstimates,
    calculate_complexity,
    estimate_resources,
)
from intentgraph.analysis.parallelism import (
    ParallelOpportunity,
    find_parallel_opportunities,
)
from intentgraph.analysis.critical_path import (
    CriticalPath,
    calculate_critical_path,
)
from intentgraph.analysis.bottlenecks import (
    Bottleneck,
    identify_bottlenecks,
)
from intentgraph.analysis.optimizer import (
    OptimizationRecord,
    OptimizationResult,
    OptimizationStrategy,
    optimize_graph,
)
from intentgraph.analysis.suggestions import suggest_improvements
from intentgraph.analysis.analyze_graph import (
    GraphAnalysis,
    analyze_graph,
    format_report,
    report_to_dict,
)

__all__ = [
    # validator
    "ValidationIssue",
    "ValidationReport",
    "validate_graph",
    # metrics
    "ComplexityMetrics",
    "ResourceEstimates",
    "calculate_complexity",
    "estimate_resources",
    "ParallelOpportunity",
    "find_parallel_opportunities",
    "CriticalPath",
    "calculate_critical_path",
    "Bottleneck",
    "identify_bottlenecks",
    # optimizer
    "OptimizationRecord",
    "OptimizationResult",
    "OptimizationStrategy",
    "optimize_graph",
    "suggest_improvements",
    # combined report
    "GraphAnalysis",
    "analyze_graph",
    "format_report",
    "report_to_dict",
]
