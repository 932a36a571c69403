"""An in-memory write-ahead log, for tests; it offers no crash durability."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from agentsdk.core.node import TxID, TxOp


class WALError(Exception):
    """A write-ahead log operation was refused."""


class UnknownTransactionError(WALError, LookupError):
    """No transaction has the given ID."""

    def __init__(self, tx_id: str) -> None:
        self.tx_id = tx_id
        super().__init__(f"unknown transaction: {tx_id}")


class TransactionFinalizedError(WALError):
    """The transaction was already committed or aborted."""


@dataclass
class _TxState:
    ops: list[TxOp] = field(default_factory=list)
    committed: bool = False
    aborted: bool = False


class MemWAL:
    """A write-ahead log kept in a dictionary; safe to use from several threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._txns: dict[TxID, _TxState] = {}
        self._next_id = 0

    def _get(self, tx_id: TxID) -> _TxState:
        try:
            return self._txns[tx_id]
        except KeyError:
            raise UnknownTransactionError(tx_id) from None

    def begin(self) -> TxID:
        """Start a transaction and return its ID."""
        with self._lock:
            self._next_id += 1
            tx_id = TxID(f"tx-{self._next_id}")
            self._txns[tx_id] = _TxState()
            return tx_id

    def append(self, tx_id: TxID, op: TxOp) -> None:
        """Record ``op`` in an open transaction."""
        with self._lock:
            tx = self._get(tx_id)
            if tx.committed or tx.aborted:
                raise TransactionFinalizedError(
                    f"transaction {tx_id} is already finalized"
                )
            tx.ops.append(op)

    def commit(self, tx_id: TxID) -> None:
        """Mark a transaction committed; an aborted one cannot be."""
        with self._lock:
            tx = self._get(tx_id)
            if tx.aborted:
                raise TransactionFinalizedError(f"transaction {tx_id} was aborted")
            tx.committed = True

    def abort(self, tx_id: TxID) -> None:
        """Mark a transaction aborted."""
        with self._lock:
            self._get(tx_id).aborted = True

    def recover(self) -> list[TxID]:
        """Return the IDs of committed transactions, oldest first."""
        with self._lock:
            return [tx_id for tx_id, tx in self._txns.items() if tx.committed]

    def replay(self, tx_id: TxID) -> list[TxOp]:
        """Return a copy of the operations recorded in a transaction."""
        with self._lock:
            return list(self._get(tx_id).ops)