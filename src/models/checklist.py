"""Checklist data structures used by the coverage scorer."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Priority(str, Enum):
    P0 = "P0"  # critical, gates the release
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"


class Status(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    PARTIAL = "PARTIAL"
    TODO = "TODO"
    MISSING = "MISSING"
    NOT_APPLICABLE = "N/A"


PRIORITY_WEIGHTS: dict[Priority, int] = {
    Priority.P0: 10,
    Priority.P1: 5,
    Priority.P2: 3,
    Priority.P3: 1,
}

# N/A is deliberately absent: those items are dropped before scoring.
STATUS_MULTIPLIERS: dict[Status, float] = {
    Status.PASS: 1.0,
    Status.PARTIAL: 0.5,
    Status.FAIL: 0.0,
    Status.TODO: 0.0,
    Status.MISSING: 0.0,
}

TESTED_STATUSES = frozenset({Status.PASS, Status.FAIL, Status.PARTIAL})


class ChecklistItem(BaseModel):
    id: str
    name: str
    category: str = ""
    priority: Priority = Priority.P1
    status: Status = Status.TODO

    @property
    def required(self) -> bool:
        return self.priority == Priority.P0

    @property
    def weight(self) -> int:
        return PRIORITY_WEIGHTS[self.priority]


class CategoryScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    total: int = 0
    tested: int = 0
    passing: int = 0
    score: int = 0


class ChecklistScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_items: int = 0
    required_items: int = 0
    tested_items: int = 0
    passing_items: int = 0
    failing_items: int = 0
    missing_items: int = 0
    overall_score: int = 0  # 0-100, weighted
    required_score: int = 0  # 0-100, P0 items only
    categories: dict[str, CategoryScore] = Field(default_factory=dict)
