"""Conversation tree nodes, paths, checkpoints, results, stores and write-ahead logs."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import (
    Callable,
    Generic,
    Iterable,
    NewType,
    Optional,
    Protocol,
    Sequence,
    TypeVar,
    runtime_checkable,
)

from agentsdk.core.cancel import Context
from agentsdk.core.content import Message

T = TypeVar("T")

NodeID = NewType("NodeID", str)
BranchID = NewType("BranchID", str)
CheckpointID = NewType("CheckpointID", str)
TxID = NewType("TxID", str)

_SEGMENT = re.compile(r"[+-]?[0-9]+")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TreePath(tuple):
    """Child indices leading from the root to a node; ``(0, 1, 2)`` reads "0/1/2"."""

    def __new__(cls, indices: Iterable[int] = ()) -> "TreePath":
        return super().__new__(cls, (int(i) for i in indices))

    def __str__(self) -> str:
        return "/".join(str(i) for i in self)

    def __repr__(self) -> str:
        return f"TreePath({tuple(self)!r})"

    def parent(self) -> "TreePath":
        """Return the parent path; empty for the root or a first-level node."""
        if len(self) <= 1:
            return TreePath()
        return TreePath(self[:-1])

    def is_ancestor_of(self, other: Sequence[int]) -> bool:
        """Return True if this path is a strict prefix of ``other``."""
        return len(self) < len(other) and tuple(other[: len(self)]) == tuple(self)


def parse_tree_path(text: str) -> TreePath:
    """Parse "0/1/2" into a TreePath; an empty string is the root path."""
    if text == "":
        return TreePath()
    indices = []
    for segment in text.split("/"):
        if not _SEGMENT.fullmatch(segment):
            raise ValueError(f"invalid tree path segment {segment!r}")
        indices.append(int(segment))
    return TreePath(indices)


@runtime_checkable
class Tokenizer(Protocol):
    """Counts the tokens in a list of messages."""

    def count_tokens(self, ctx: Context, messages: Sequence[Message]) -> int:
        ...


class NodeState(enum.IntEnum):
    """Lifecycle state of a node."""

    ACTIVE = 0
    ARCHIVED = 1
    COMPACTED = 2


@dataclass
class Node:
    """One message in the conversation tree."""

    id: NodeID
    message: Message
    parent_id: NodeID = NodeID("")
    state: NodeState = NodeState.ACTIVE
    version: int = 0
    depth: int = 0
    branch_id: BranchID = BranchID("")
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)
    archived_at: Optional[datetime] = None
    archived_by: str = ""
    summary_of: tuple[NodeID, ...] = ()

    def __post_init__(self) -> None:
        self.summary_of = tuple(self.summary_of)


@dataclass(frozen=True)
class Checkpoint:
    """A named snapshot of a branch tip."""

    id: CheckpointID
    branch: BranchID
    node_id: NodeID
    name: str = ""
    created_at: datetime = field(default_factory=_now)


class ResultKind(str, enum.Enum):
    """Whether a result is intermediate or terminal."""

    DELTA = "delta"
    FINAL = "final"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Result(Generic[T]):
    """A value tagged with its kind."""

    kind: ResultKind
    value: T


def new_delta(value: T) -> Result[T]:
    """Wrap ``value`` as an intermediate result."""
    return Result(ResultKind.DELTA, value)


def new_final(value: T) -> Result[T]:
    """Wrap ``value`` as a terminal result."""
    return Result(ResultKind.FINAL, value)


@runtime_checkable
class StoreTx(Protocol):
    """The store operations allowed inside a transaction."""

    def save_node(self, ctx: Context, node: Node) -> None:
        ...

    def save_branch(self, ctx: Context, branch: BranchID, tip_id: NodeID) -> None:
        ...

    def save_checkpoint(self, ctx: Context, checkpoint: Checkpoint) -> None:
        ...


@runtime_checkable
class Store(Protocol):
    """Persistence for conversation trees; lookups raise when nothing is found."""

    def save_node(self, ctx: Context, node: Node) -> None:
        ...

    def load_node(self, ctx: Context, node_id: NodeID) -> Node:
        ...

    def load_children(self, ctx: Context, parent_id: NodeID) -> list[Node]:
        ...

    def load_path(self, ctx: Context, to_node_id: NodeID) -> list[Node]:
        ...

    def save_branch(self, ctx: Context, branch: BranchID, tip_id: NodeID) -> None:
        ...

    def load_branch(self, ctx: Context, branch: BranchID) -> NodeID:
        ...

    def list_branches(self, ctx: Context) -> dict[BranchID, NodeID]:
        ...

    def save_checkpoint(self, ctx: Context, checkpoint: Checkpoint) -> None:
        ...

    def load_checkpoint(self, ctx: Context, checkpoint_id: CheckpointID) -> Checkpoint:
        ...

    def load_tree(
        self, ctx: Context, root_id: NodeID
    ) -> tuple[list[Node], dict[BranchID, NodeID]]:
        ...

    def tx(self, ctx: Context, fn: Callable[[StoreTx], None]) -> None:
        ...


class TxOpKind(str, enum.Enum):
    """The kind of a logged operation."""

    ADD_NODE = "add_node"
    UPDATE_NODE = "update_node"
    SET_BRANCH = "set_branch"
    ADD_CHILD = "add_child"
    ADD_CHECKPOINT = "add_checkpoint"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TxOp:
    """One operation within a logged transaction."""

    kind: TxOpKind
    node_id: NodeID = NodeID("")
    parent_id: NodeID = NodeID("")
    node: Optional[Node] = None
    branch_id: BranchID = BranchID("")
    tip_id: NodeID = NodeID("")
    checkpoint: Optional[Checkpoint] = None


@runtime_checkable
class WAL(Protocol):
    """Write-ahead log for atomic tree mutations; failures raise."""

    def begin(self) -> TxID:
        ...

    def append(self, tx_id: TxID, op: TxOp) -> None:
        ...

    def commit(self, tx_id: TxID) -> None:
        ...

    def abort(self, tx_id: TxID) -> None:
        ...

    def recover(self) -> list[TxID]:
        ...

    def replay(self, tx_id: TxID) -> list[TxOp]:
        ...