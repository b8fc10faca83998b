"""Node hierarchy: storage, completion aggregation and structural mutation."""

from mindplan.nodes.aggregator import CompletionAggregator, aggregate
from mindplan.nodes.mutator import TreeMutator
from mindplan.nodes.store import NodeStore
from mindplan.nodes.tree import ProjectTree

__all__ = ["CompletionAggregator", "NodeStore", "ProjectTree", "TreeMutator", "aggregate"]
