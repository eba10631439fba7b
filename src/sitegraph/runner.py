from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Set

from pydantic import Field

from .catalogue import CATALOGUE, NodeSpec
from .coerce import to_bool, to_string
from .context import Effect, RuntimeContext, TriggerTable
from .ir import Element, ElementType, GraphDefinition, Node, Project, WireModel
from .ops import evaluate_expr

logger = logging.getLogger(__name__)

EffectHandler = Callable[[Effect], None]


class Evaluation(WireModel):
    style: Dict[str, Any] = Field(default_factory=dict)
    content: str = ""
    effects: List[Effect] = Field(default_factory=list)


class _NodeFrame:
    """The view one node's reducer has of the current pass."""

    def __init__(self, evaluation: "_Pass", node: Node) -> None:
        self._pass = evaluation
        self._node = node

    def input(self, socket: str) -> Any:
        conn = self._pass.incoming.get((self._node.id, socket))
        if conn is None:
            return None
        return self._pass.resolve(conn.source_node_id)

    def connected(self, socket: str) -> bool:
        return (self._node.id, socket) in self._pass.incoming

    def node_value(self) -> Any:
        return self._node.data.value

    def node_data(self, key: str) -> Any:
        return self._node.data.model_dump(by_alias=True).get(key)

    def input_count(self) -> int:
        return self._node.data.input_count or 0

    def context(self, key: str) -> Any:
        return self._pass.context.get(key)

    def random(self) -> float:
        return self._pass.rng.random()


class _Pass:
    """One evaluation pass: memo and in-progress markers live and die here."""

    def __init__(
        self,
        graph: GraphDefinition,
        overrides: Dict[str, Any],
        context: RuntimeContext,
        catalogue: Dict[str, NodeSpec],
        rng: random.Random,
    ) -> None:
        self.graph = graph
        self.overrides = overrides
        self.context = context.model_dump(by_alias=True)
        self.catalogue = catalogue
        self.rng = rng
        self.nodes = graph.node_map()
        self.incoming = graph.incoming()
        self.memo: Dict[str, Any] = {}
        self.in_progress: Set[str] = set()

    def resolve(self, node_id: str) -> Any:
        if node_id in self.overrides:
            return self.overrides[node_id]
        if node_id in self.memo:
            return self.memo[node_id]
        if node_id in self.in_progress:
            logger.debug("Cycle through node '%s' in graph '%s'; using default", node_id, self.graph.id)
            return None
        node = self.nodes.get(node_id)
        if node is None:
            return None

        self.in_progress.add(node_id)
        try:
            result = self.reduce(node)
        finally:
            self.in_progress.discard(node_id)
        self.memo[node_id] = result
        return result

    def reduce(self, node: Node) -> Any:
        spec = self.catalogue.get(node.type)
        if spec is None:
            return node.data.value
        return evaluate_expr(spec.reduce, _NodeFrame(self, node))

    def resolve_socket(self, node: Node, socket: str) -> Any:
        return _NodeFrame(self, node).input(socket)


class Interpreter:
    """Evaluates graphs tick after tick for one rendered view.

    The interpreter owns the only cross-tick state of the engine: the
    rising-edge table for action nodes. Call :meth:`leave_page` (or
    :meth:`reset` for a single scope) when a view is left so stale trigger
    history is not replayed on return.
    """

    def __init__(
        self,
        catalogue: Optional[Dict[str, NodeSpec]] = None,
        *,
        on_effect: Optional[EffectHandler] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.catalogue = CATALOGUE if catalogue is None else catalogue
        self.triggers = TriggerTable()
        self.on_effect = on_effect
        self._rng = random.Random(seed)

    def evaluate(
        self,
        graph: GraphDefinition,
        overrides: Optional[Dict[str, Any]] = None,
        context: Optional[RuntimeContext] = None,
        *,
        scope: str = "",
    ) -> Evaluation:
        state = _Pass(graph, overrides or {}, context or RuntimeContext(), self.catalogue, self._rng)
        result = Evaluation()
        try:
            output = graph.output_node()
            if output is not None:
                style = state.resolve_socket(output, "in-style")
                if isinstance(style, dict):
                    result.style = dict(style)
                content = state.resolve_socket(output, "in-content")
                if content is not None:
                    result.content = to_string(content)
            result.effects = self._fire_actions(state, scope)
        except RecursionError:
            logger.error("Graph '%s' is too deep to evaluate; returning partial result", graph.id)

        if self.on_effect is not None:
            for effect in result.effects:
                self.on_effect(effect)
        return result

    def run(
        self,
        graph: GraphDefinition,
        contexts: Iterable[RuntimeContext],
        overrides: Optional[Dict[str, Any]] = None,
        *,
        scope: str = "",
    ) -> Iterator[Evaluation]:
        """Evaluate once per context, as a frame loop would."""
        for context in contexts:
            yield self.evaluate(graph, overrides, context, scope=scope)

    def reset(self, scope: Optional[str] = None) -> None:
        self.triggers.reset(scope)

    def leave_page(self, project: Project, page_id: str) -> None:
        """Forget the trigger history of every element on the page being left."""
        for element in project.elements:
            if element.page_id == page_id:
                self.triggers.reset(element.id)

    def _fire_actions(self, state: _Pass, scope: str) -> List[Effect]:
        effects: List[Effect] = []
        for node in state.graph.nodes:
            spec = self.catalogue.get(node.type)
            if spec is None or spec.action is None:
                continue
            frame = _NodeFrame(state, node)
            trigger = to_bool(frame.input(spec.action.trigger))
            if not self.triggers.rising((scope, state.graph.id, node.id), trigger):
                continue
            payload = state.resolve(node.id)
            if not to_bool(payload):
                logger.debug("Action node '%s' triggered without a target; skipped", node.id)
                continue
            options = {key: evaluate_expr(expr, frame) for key, expr in spec.action.options.items()}
            effects.append(Effect(
                kind=spec.action.effect,
                node_id=node.id,
                graph_id=state.graph.id,
                scope=scope,
                payload=payload,
                options=options,
            ))
            logger.info("Fired %s from node '%s' (%s)", spec.action.effect, node.id, scope or "-")
        return effects


def evaluate(
    graph: GraphDefinition,
    overrides: Optional[Dict[str, Any]] = None,
    context: Optional[RuntimeContext] = None,
) -> Evaluation:
    """One-shot evaluation with no trigger history (a held trigger fires)."""
    return Interpreter().evaluate(graph, overrides, context)


def element_graphs(element: Element, project: Project) -> List[GraphDefinition]:
    """Component graph first, then attached scripts, in attachment order."""
    from .instances import effective_graph

    graphs: List[GraphDefinition] = []
    if element.type == ElementType.CUSTOM.value:
        component = effective_graph(element, project.components)
        if component is not None:
            graphs.append(component)
    for script_id in element.scripts:
        script = project.script(script_id)
        if script is None:
            logger.warning("Element '%s' references missing script '%s'", element.id, script_id)
            continue
        graphs.append(script)
    return graphs


def evaluate_element(
    element: Element,
    project: Project,
    interpreter: Optional[Interpreter] = None,
    context: Optional[RuntimeContext] = None,
) -> Evaluation:
    """Evaluate every graph attached to an element and compose the results.

    Later graphs win on style keys; the last non-empty content wins and the
    element's own content is the fallback.
    """
    interpreter = interpreter or Interpreter()
    combined = Evaluation(content=element.content or "")
    computed_content = ""
    for graph in element_graphs(element, project):
        res = interpreter.evaluate(graph, element.prop_overrides, context, scope=element.id)
        combined.style.update(res.style)
        if res.content:
            computed_content = res.content
        combined.effects.extend(res.effects)
    if computed_content:
        combined.content = computed_content
    return combined


def run_graph(
    path: Path,
    *,
    overrides: Optional[Dict[str, Any]] = None,
    contexts: Optional[List[RuntimeContext]] = None,
    seed: Optional[int] = None,
) -> List[Evaluation]:
    from .storage import load_graph

    graph = load_graph(path)
    interpreter = Interpreter(seed=seed)
    results = list(interpreter.run(graph, contexts or [RuntimeContext()], overrides))
    logger.info("Evaluated graph '%s' over %d tick(s)", graph.id, len(results))
    return results
