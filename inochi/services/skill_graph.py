"""
Редактор графа пререквизитов и вариантов.

Граф - арена скиллов по id плюс список рёбер (source_id, target_id, kind).
Ребро prerequisite означает «source требует target», variant - «target
является вариантом source». Хранимые списки skills.prerequisites / variants
строятся из рёбер и записываются обратно, отдельной копии топологии нет.
Ссылки на удалённые скиллы в граф не попадают, но при записи сохраняются.

Петля (скилл ссылается сам на себя) запрещена. Циклы через другие скиллы
допустимы, но для пререквизитов о них сообщается предупреждением.
"""
import logging
from collections import deque
from typing import Dict, List, NamedTuple, Optional, Tuple

from fastapi import HTTPException

from inochi.models.skill import Skill
from inochi.repositories.skill_repository import SkillRepository
from inochi.schemas.graph import EdgeKind, GraphNode, GraphEdge, GraphResponse, EdgeChangeResponse
from inochi.services.live_queries import QueryHub, live_hub, SKILLS_TOPIC

logger = logging.getLogger(__name__)

REFERENCE_FIELDS = {
    EdgeKind.prerequisite: "prerequisites",
    EdgeKind.variant: "variants",
}


class SelfReferenceError(ValueError):
    pass


class UnknownSkillError(KeyError):
    pass


class Edge(NamedTuple):
    source_id: int
    target_id: int
    kind: EdgeKind


class SkillGraph:
    def __init__(self):
        self.nodes: Dict[int, Skill] = {}
        self.edges: List[Edge] = []

    @classmethod
    def from_skills(cls, skills: List[Skill]) -> "SkillGraph":
        graph = cls()
        for skill in skills:
            graph.nodes[skill.id] = skill
        for skill in skills:
            for kind, field in REFERENCE_FIELDS.items():
                for target_id in getattr(skill, field) or []:
                    if target_id == skill.id or target_id not in graph.nodes:
                        logger.debug(f"Пропущена ссылка {skill.id} -> {target_id} ({kind.value})")
                        continue
                    edge = Edge(skill.id, target_id, kind)
                    if edge not in graph.edges:
                        graph.edges.append(edge)
        return graph

    def _check_nodes(self, source_id: int, target_id: int) -> None:
        for node_id in (source_id, target_id):
            if node_id not in self.nodes:
                raise UnknownSkillError(node_id)

    def targets(self, source_id: int, kind: EdgeKind) -> List[int]:
        return [e.target_id for e in self.edges if e.source_id == source_id and e.kind == kind]

    def stored_targets(self, source_id: int, kind: EdgeKind) -> List[int]:
        """
        Список для записи в skills.<field>: рёбра графа в прежнем порядке, новые в конце.
        Ссылки на удалённые скиллы граф не видит, они остаются на своих местах.
        Петли и повторы не сохраняются.
        """
        targets = self.targets(source_id, kind)
        stored = []
        for target_id in getattr(self.nodes[source_id], REFERENCE_FIELDS[kind]) or []:
            if target_id not in self.nodes:
                stored.append(target_id)
            elif target_id in targets and target_id not in stored:
                stored.append(target_id)
        return stored + [t for t in targets if t not in stored]

    def add_edge(self, source_id: int, target_id: int, kind: EdgeKind) -> Tuple[bool, List[int]]:
        """Добавить ребро. Возвращает (создано ли, цикл пререквизитов или [])."""
        if source_id == target_id:
            raise SelfReferenceError(source_id)
        self._check_nodes(source_id, target_id)

        edge = Edge(source_id, target_id, kind)
        if edge in self.edges:
            return False, []
        self.edges.append(edge)

        cycle = self.find_cycle_through(edge) if kind == EdgeKind.prerequisite else []
        return True, cycle

    def remove_edge(self, source_id: int, target_id: int, kind: EdgeKind) -> bool:
        edge = Edge(source_id, target_id, kind)
        if edge not in self.edges:
            return False
        self.edges.remove(edge)
        return True

    def find_cycle_through(self, edge: Edge) -> List[int]:
        """Путь source -> target -> ... -> source по пререквизитам, если он есть."""
        path = self._find_path(edge.target_id, edge.source_id)
        return [edge.source_id] + path if path else []

    def _find_path(self, start: int, goal: int) -> Optional[List[int]]:
        parents: Dict[int, Optional[int]] = {start: None}
        queue = deque([start])
        while queue:
            node = queue.popleft()
            if node == goal:
                path = []
                while node is not None:
                    path.append(node)
                    node = parents[node]
                return list(reversed(path))
            for target_id in self.targets(node, EdgeKind.prerequisite):
                if target_id not in parents:
                    parents[target_id] = node
                    queue.append(target_id)
        return None

    def prerequisite_cycles(self) -> List[List[int]]:
        """По одному циклу на каждое обратное ребро обхода в глубину."""
        WHITE, GRAY, BLACK = 0, 1, 2
        color = {node_id: WHITE for node_id in self.nodes}
        cycles: List[List[int]] = []

        for root in sorted(self.nodes):
            if color[root] != WHITE:
                continue
            color[root] = GRAY
            stack = [(root, iter(self.targets(root, EdgeKind.prerequisite)))]
            path = [root]
            while stack:
                node, children = stack[-1]
                child = next(children, None)
                if child is None:
                    color[node] = BLACK
                    stack.pop()
                    path.pop()
                elif color[child] == GRAY:
                    cycles.append(path[path.index(child):] + [child])
                elif color[child] == WHITE:
                    color[child] = GRAY
                    stack.append((child, iter(self.targets(child, EdgeKind.prerequisite))))
                    path.append(child)
        return cycles

    def to_response(self) -> GraphResponse:
        return GraphResponse(
            nodes=[
                GraphNode(id=s.id, title=s.title, level=s.level, difficulty=s.difficulty)
                for s in sorted(self.nodes.values(), key=lambda s: s.id)
            ],
            edges=[GraphEdge(source_id=e.source_id, target_id=e.target_id, kind=e.kind) for e in self.edges],
            cycles=self.prerequisite_cycles(),
        )


class SkillGraphService:
    def __init__(self, skills: SkillRepository, hub: Optional[QueryHub] = None):
        self.skills = skills
        self.hub = hub or live_hub

    async def load(self) -> SkillGraph:
        return SkillGraph.from_skills(await self.skills.list_all())

    async def get_graph(self) -> GraphResponse:
        return (await self.load()).to_response()

    async def _write_back(self, graph: SkillGraph, source_id: int, kind: EdgeKind) -> None:
        skill = graph.nodes[source_id]
        await self.skills.update(skill, {REFERENCE_FIELDS[kind]: graph.stored_targets(source_id, kind)})
        await self.hub.publish(SKILLS_TOPIC)

    async def add_edge(self, source_id: int, target_id: int, kind: EdgeKind) -> EdgeChangeResponse:
        graph = await self.load()
        try:
            created, cycle = graph.add_edge(source_id, target_id, kind)
        except SelfReferenceError:
            raise HTTPException(status_code=400, detail="Скилл не может ссылаться на самого себя")
        except UnknownSkillError as e:
            raise HTTPException(status_code=404, detail=f"Скилл не найден: {e.args[0]}")

        warnings = []
        if cycle:
            warnings.append("Связь образует цикл пререквизитов: " + " -> ".join(str(i) for i in cycle))
            logger.warning(f"Цикл пререквизитов: {cycle}")
        if created:
            await self._write_back(graph, source_id, kind)

        return EdgeChangeResponse(
            edge=GraphEdge(source_id=source_id, target_id=target_id, kind=kind),
            created=created,
            warnings=warnings,
            cycle=cycle,
        )

    async def remove_edge(self, source_id: int, target_id: int, kind: EdgeKind) -> None:
        graph = await self.load()
        if not graph.remove_edge(source_id, target_id, kind):
            raise HTTPException(status_code=404, detail="Связь не найдена")
        await self._write_back(graph, source_id, kind)
