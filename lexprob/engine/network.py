"""
Bayesian Network Model.

Models uncertain legal propositions ("applicant is over 18", "income is
sufficient") as nodes with prior probabilities, and dependencies between
them as conditional probability tables (CPTs) keyed by parent truth values.

Inference is a single-hop table lookup:
- Parentless node → its prior
- Otherwise → CPT entry for the parent-state vector built from evidence
  (absent parents count as False), falling back to the prior on a miss

Lifecycle: build with add_node / add_conditional_probability, then hand the
network to a consumer. Consumers work on a private frozen copy.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence, Tuple, Union

import structlog

from lexprob.exceptions import (
    CyclicNetwork,
    NetworkFrozen,
    ParentArityMismatch,
    UnknownNode,
    check_probability,
)
from lexprob.schemas.network import CPTEntry, NetworkSnapshot, NodeSnapshot

logger = structlog.get_logger(__name__)

# ── Configuration (no magic numbers) ─────────────────────────────────────

DEFAULT_PARENT_PRIOR: float = 0.5  # Prior for auto-created parents / children

# Attenuation applied to probability_all_true to seed the remaining CPT rows.
SINGLE_PARENT_FALSE_FACTOR: float = 0.1
TWO_PARENT_MIXED_FACTOR: float = 0.3
TWO_PARENT_ALL_FALSE_FACTOR: float = 0.05

Evidence = Union[Mapping[str, bool], Iterable[Tuple[str, bool]]]
ParentStates = Tuple[bool, ...]


def normalize_evidence(evidence: Optional[Evidence]) -> dict[str, bool]:
    """
    Turn a mapping or a list of (id, bool) pairs into a dict.

    When a pair list names the same identifier twice, the first pair wins.
    """
    if evidence is None:
        return {}
    if isinstance(evidence, Mapping):
        return {node_id: bool(state) for node_id, state in evidence.items()}
    resolved: dict[str, bool] = {}
    for node_id, state in evidence:
        resolved.setdefault(node_id, bool(state))
    return resolved


@dataclass(eq=False)
class BayesianNode:
    """
    A node in a Bayesian network representing a legal proposition.

    Identity is the node id: two nodes with the same id compare equal.
    The prior is validated on every assignment. Once frozen, the node
    rejects all mutation.
    """
    id: str
    prior: float
    parents: list[str] = field(default_factory=list)
    cpt: dict[ParentStates, float] = field(default_factory=dict)
    _frozen: bool = field(default=False, init=False, repr=False)

    def __setattr__(self, name: str, value: object) -> None:
        if self._frozen:
            raise NetworkFrozen(f"set {name} of node {self.id!r}")
        if name == "prior":
            check_probability(value, name="prior", node_id=getattr(self, "id", None))
        super().__setattr__(name, value)

    def add_parent(self, parent_id: str) -> None:
        """Add a parent dependency; duplicates are ignored."""
        self._ensure_mutable("add parent")
        if parent_id not in self.parents:
            self.parents.append(parent_id)

    def set_conditional_probability(
        self, parent_states: Sequence[bool], probability: float
    ) -> None:
        """
        Set P(node | parent_states).

        Raises:
            NetworkFrozen: node is frozen
            InvalidProbability: probability outside [0, 1]
            ParentArityMismatch: len(parent_states) != number of parents
        """
        self._ensure_mutable("set conditional probability")
        check_probability(probability, node_id=self.id)
        if len(parent_states) != len(self.parents):
            raise ParentArityMismatch(self.id, len(self.parents), len(parent_states))
        self.cpt[tuple(bool(s) for s in parent_states)] = probability

    def probability(self, evidence: Mapping[str, bool]) -> float:
        """Probability of this node being true given (normalized) evidence."""
        if not self.parents:
            return self.prior

        state_vec = tuple(evidence.get(parent_id, False) for parent_id in self.parents)
        return self.cpt.get(state_vec, self.prior)

    def freeze(self) -> None:
        """Make the node read-only, including its parent list and CPT."""
        if self._frozen:
            return
        self.parents = tuple(self.parents)
        self.cpt = MappingProxyType(self.cpt)
        self._frozen = True

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def copy(self) -> "BayesianNode":
        """Mutable deep copy."""
        return BayesianNode(
            id=self.id,
            prior=self.prior,
            parents=list(self.parents),
            cpt=dict(self.cpt),
        )

    def _ensure_mutable(self, operation: str) -> None:
        if self._frozen:
            raise NetworkFrozen(f"{operation} on node {self.id!r}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BayesianNode):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


class BayesianNetwork:
    """
    Bayesian network for modeling uncertainty in legal reasoning.

    Nodes are kept in insertion order, which fixes the order of
    Monte Carlo draws and of entailment results.

    No acyclicity check is performed on construction or query. Call
    validate_acyclic() explicitly when a guarantee is needed.
    """

    def __init__(self, strict: bool = False):
        self._nodes: dict[str, BayesianNode] = {}
        self._frozen = False
        self.strict = strict

    # ── Construction ─────────────────────────────────────────────────────

    def add_node(self, node_id: str, prior: float) -> None:
        """Create or overwrite a parentless node with the given prior."""
        self._ensure_mutable("add node")
        self._nodes[node_id] = BayesianNode(node_id, prior)

    def add_conditional_probability(
        self,
        node_id: str,
        parent_ids: Sequence[str],
        probability: float,
    ) -> None:
        """
        Declare that ``node_id`` depends on ``parent_ids``.

        Missing parents (and a missing child) are created with a 0.5 prior.
        Sets the all-parents-true CPT row to ``probability`` and seeds the
        other rows with fixed attenuation factors:

        - 1 parent:  [F]            = p × 0.1
        - 2 parents: [T,F] = [F,T]  = p × 0.3, [F,F] = p × 0.05
        - 3+ parents: nothing else; other rows fall back to the prior
        """
        self._ensure_mutable("add conditional probability")
        check_probability(probability, node_id=node_id)

        existing = self._nodes.get(node_id)
        merged = list(existing.parents) if existing else []
        for parent_id in parent_ids:
            if parent_id not in merged:
                merged.append(parent_id)
        if len(merged) != len(parent_ids):
            raise ParentArityMismatch(node_id, len(merged), len(parent_ids))

        for parent_id in parent_ids:
            if parent_id not in self._nodes:
                self._nodes[parent_id] = BayesianNode(parent_id, DEFAULT_PARENT_PRIOR)
                logger.debug("parent_auto_created", node_id=parent_id, child=node_id)

        node = self._nodes.get(node_id)
        if node is None:
            node = BayesianNode(node_id, DEFAULT_PARENT_PRIOR)
            self._nodes[node_id] = node

        for parent_id in parent_ids:
            node.add_parent(parent_id)

        arity = len(parent_ids)
        node.set_conditional_probability([True] * arity, probability)

        if arity == 1:
            node.set_conditional_probability(
                [False], probability * SINGLE_PARENT_FALSE_FACTOR
            )
        elif arity == 2:
            node.set_conditional_probability(
                [True, False], probability * TWO_PARENT_MIXED_FACTOR
            )
            node.set_conditional_probability(
                [False, True], probability * TWO_PARENT_MIXED_FACTOR
            )
            node.set_conditional_probability(
                [False, False], probability * TWO_PARENT_ALL_FALSE_FACTOR
            )

    def remove_node(self, node_id: str) -> Optional[BayesianNode]:
        """Remove and return a node, or None if absent. Children keep their parent ids."""
        self._ensure_mutable("remove node")
        return self._nodes.pop(node_id, None)

    def freeze(self) -> "BayesianNetwork":
        """Mark the network and every node read-only. Returns self for chaining."""
        for node in self._nodes.values():
            node.freeze()
        self._frozen = True
        return self

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    # ── Queries ──────────────────────────────────────────────────────────

    def query(
        self,
        node_id: str,
        evidence: Optional[Evidence] = None,
        strict: Optional[bool] = None,
    ) -> float:
        """
        P(node_id = True | evidence) by direct CPT lookup.

        An unknown ``node_id`` yields 0.0, or raises UnknownNode when the
        query (or the network) is strict.
        """
        node = self._nodes.get(node_id)
        if node is None:
            if self.strict if strict is None else strict:
                raise UnknownNode(node_id)
            logger.debug("query_unknown_node", node_id=node_id)
            return 0.0

        return node.probability(normalize_evidence(evidence))

    @property
    def nodes(self) -> Mapping[str, BayesianNode]:
        """Read-only view of the nodes, in insertion order."""
        return MappingProxyType(self._nodes)

    def node_count(self) -> int:
        return len(self._nodes)

    def contains_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get_node(self, node_id: str) -> Optional[BayesianNode]:
        return self._nodes.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def copy(self, strict: Optional[bool] = None) -> "BayesianNetwork":
        """
        Independent deep copy. The copy is always mutable.

        Args:
            strict: Override the query strictness of the copy
        """
        clone = BayesianNetwork(strict=self.strict if strict is None else strict)
        for node_id, node in self._nodes.items():
            clone._nodes[node_id] = node.copy()
        return clone

    # ── Structure checks ─────────────────────────────────────────────────

    def find_cycle(self) -> Optional[list[str]]:
        """
        Return one dependency cycle as [a, b, ..., a], or None.

        Walks child → parent edges. Parent ids that are no longer in the
        network (after remove_node) are ignored.
        """
        visiting: set[str] = set()
        done: set[str] = set()

        for start in self._nodes:
            if start in done:
                continue
            path = [start]
            visiting.add(start)
            stack = [iter(self._nodes[start].parents)]

            while stack:
                parent_id = next(stack[-1], None)
                if parent_id is None:
                    finished = path.pop()
                    visiting.discard(finished)
                    done.add(finished)
                    stack.pop()
                    continue
                if parent_id in visiting:
                    return path[path.index(parent_id):] + [parent_id]
                if parent_id in done or parent_id not in self._nodes:
                    continue
                visiting.add(parent_id)
                path.append(parent_id)
                stack.append(iter(self._nodes[parent_id].parents))

        return None

    def validate_acyclic(self) -> None:
        """Raise CyclicNetwork if any node depends on itself."""
        cycle = self.find_cycle()
        if cycle is not None:
            logger.warning("network_cycle_detected", cycle=cycle)
            raise CyclicNetwork(cycle)

    # ── Snapshots ────────────────────────────────────────────────────────

    def to_snapshot(self) -> NetworkSnapshot:
        """Serializable pydantic view of the network."""
        return NetworkSnapshot(
            strict=self.strict,
            nodes=[
                NodeSnapshot(
                    id=node.id,
                    prior=node.prior,
                    parents=list(node.parents),
                    cpt=[
                        CPTEntry(states=list(states), probability=p)
                        for states, p in node.cpt.items()
                    ],
                )
                for node in self._nodes.values()
            ],
        )

    @classmethod
    def from_snapshot(cls, snapshot: NetworkSnapshot) -> "BayesianNetwork":
        """Rebuild a mutable network from a snapshot, re-validating every row."""
        network = cls(strict=snapshot.strict)
        for entry in snapshot.nodes:
            node = BayesianNode(entry.id, entry.prior)
            for parent_id in entry.parents:
                node.add_parent(parent_id)
            for row in entry.cpt:
                node.set_conditional_probability(row.states, row.probability)
            network._nodes[node.id] = node
        return network

    # ── Private helpers ──────────────────────────────────────────────────

    def _ensure_mutable(self, operation: str) -> None:
        if self._frozen:
            raise NetworkFrozen(operation)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "mutable"
        return f"BayesianNetwork(nodes={len(self._nodes)}, {state})"
