"""DAG execution engine for operator graphs.

The engine derives blob dependencies between operators, groups linear runs of
nodes into chains, and executes one run of the graph wave by wave: all chains
whose predecessors have finished are dispatched to a thread pool, and the wave
is joined before the next one starts.

Anything that wants to observe or replace per-chain execution (for example
the profiling net) passes its own ``run_chain`` callable to ``run()``.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Protocol, Sequence

import networkx as nx

from profdag.graph import Graph, Operator
from profdag.logging import get_logger

logger = get_logger(__name__)

Chain = List[int]
ChainRunner = Callable[[Sequence[int]], bool]


class ExecutionEngine(Protocol):
    """Capability interface a net needs from an engine."""

    @property
    def nodes(self) -> Sequence[Operator]: ...

    @property
    def node_count(self) -> int: ...

    def run_chain(self, chain: Sequence[int]) -> bool: ...

    def run(self, run_chain: Optional[ChainRunner] = None) -> bool: ...


def build_dependency_graph(operators: Sequence[Operator]) -> nx.DiGraph:
    """Return a DiGraph over node indices with an edge ``u -> v`` when v must follow u.

    Read-after-write, write-after-write and write-after-read hazards on blob
    names all create edges; node order in ``operators`` is the program order.
    """
    dag = nx.DiGraph()
    dag.add_nodes_from(range(len(operators)))

    last_writer: Dict[str, int] = {}
    readers: Dict[str, List[int]] = {}

    for idx, op in enumerate(operators):
        for blob in op.definition.inputs:
            writer = last_writer.get(blob)
            if writer is not None and writer != idx:
                dag.add_edge(writer, idx)
        for blob in op.definition.outputs:
            writer = last_writer.get(blob)
            if writer is not None and writer != idx:
                dag.add_edge(writer, idx)
            for reader in readers.get(blob, []):
                if reader != idx:
                    dag.add_edge(reader, idx)
        for blob in op.definition.inputs:
            readers.setdefault(blob, []).append(idx)
        for blob in op.definition.outputs:
            last_writer[blob] = idx
            readers[blob] = []

    return dag


def compute_chains(dag: nx.DiGraph) -> List[Chain]:
    """Group nodes into maximal linear chains.

    A node joins its parent's chain when it is that parent's only child and
    the parent is its only parent. Chains are returned in topological order of
    their first node, with node indices in execution order.
    """
    chains: List[Chain] = []
    chain_of: Dict[int, int] = {}

    for node in nx.lexicographical_topological_sort(dag):
        parents = list(dag.predecessors(node))
        if len(parents) == 1 and dag.out_degree(parents[0]) == 1:
            chain_id = chain_of[parents[0]]
            chains[chain_id].append(node)
        else:
            chain_id = len(chains)
            chains.append([node])
        chain_of[node] = chain_id

    return chains


class DAGEngine:
    """Run a ``Graph`` by dispatching independent chains to worker threads.

    Args:
        graph: Graph to execute.
        max_workers: Size of the thread pool used for each wave of chains.
    """

    def __init__(self, graph: Graph, max_workers: int = 4) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.graph = graph
        self.max_workers = max_workers
        self._nodes: List[Operator] = list(graph.operators)
        self.dag = build_dependency_graph(self._nodes)
        self.chains = compute_chains(self.dag)
        self.waves = self._compute_waves()
        logger.debug(
            f"Engine for '{graph.name}': {len(self._nodes)} nodes, "
            f"{len(self.chains)} chains, {len(self.waves)} waves"
        )

    @property
    def nodes(self) -> Sequence[Operator]:
        return self._nodes

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    def _compute_waves(self) -> List[List[int]]:
        """Return chain ids grouped into dependency levels."""
        chain_of = {node: cid for cid, chain in enumerate(self.chains) for node in chain}
        chain_dag = nx.DiGraph()
        chain_dag.add_nodes_from(range(len(self.chains)))
        for u, v in self.dag.edges:
            if chain_of[u] != chain_of[v]:
                chain_dag.add_edge(chain_of[u], chain_of[v])
        return [sorted(wave) for wave in nx.topological_generations(chain_dag)]

    def run_chain(self, chain: Sequence[int]) -> bool:
        """Run the operators of ``chain`` in order.

        Every operator runs even after an earlier one in the chain failed.
        """
        success = True
        for idx in chain:
            ok = bool(self._nodes[idx].run())
            if not ok:
                logger.debug(f"Operator #{idx} ({self._nodes[idx].type}) failed")
            success &= ok
        return success

    def run(self, run_chain: Optional[ChainRunner] = None) -> bool:
        """Execute the whole graph once.

        Args:
            run_chain: Per-chain entry point for this run; defaults to
                ``self.run_chain``.

        Returns:
            True if every chain succeeded.
        """
        runner = run_chain or self.run_chain
        success = True
        if not self.waves:
            return success

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            for wave in self.waves:
                chains = [self.chains[cid] for cid in wave]
                if len(chains) == 1:
                    success &= bool(runner(chains[0]))
                    continue
                # map() joins the whole wave before the next one is scheduled
                for ok in executor.map(runner, chains):
                    success &= bool(ok)
        return success
