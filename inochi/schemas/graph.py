from pydantic import BaseModel
from enum import Enum
from typing import List

from inochi.models.skill import LevelEnum


class EdgeKind(str, Enum):
    prerequisite = "prerequisite"
    variant = "variant"


class GraphNode(BaseModel):
    id: int
    title: str
    level: LevelEnum
    difficulty: int


class GraphEdge(BaseModel):
    source_id: int
    target_id: int
    kind: EdgeKind


class GraphResponse(BaseModel):
    nodes: List[GraphNode]
    edges: List[GraphEdge]
    # Циклы по пререквизитам: каждый цикл - путь идентификаторов
    cycles: List[List[int]] = []


class EdgeRequest(BaseModel):
    source_id: int
    target_id: int
    kind: EdgeKind = EdgeKind.prerequisite


class EdgeChangeResponse(BaseModel):
    edge: GraphEdge
    created: bool
    warnings: List[str] = []
    cycle: List[int] = []
