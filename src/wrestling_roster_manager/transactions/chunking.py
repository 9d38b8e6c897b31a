"""Split large transactions to fit a store's per-commit mutation limit."""

from __future__ import annotations

from collections.abc import Iterable

from wrestling_roster_manager.domain.mutation import EntityKind, Mutation, MutationOp, Transaction


def _combine(first: Mutation, second: Mutation) -> Mutation:
    if second.op is MutationOp.DELETE:
        if first.op is MutationOp.INSERT:
            raise ValueError(f"{first.kind} {first.entity_id!r} is inserted and deleted in one batch")
        return Mutation(
            kind=first.kind,
            entity_id=first.entity_id,
            op=MutationOp.DELETE,
            expected={**second.expected, **first.expected},
            session_id=first.session_id,
        )
    if first.op is MutationOp.DELETE or second.op is MutationOp.INSERT:
        raise ValueError(f"Cannot combine {first.op} then {second.op} on {first.kind} {first.entity_id!r}")
    return Mutation(
        kind=first.kind,
        entity_id=first.entity_id,
        op=first.op,
        changes={**first.changes, **second.changes},
        expected={**second.expected, **first.expected},
        session_id=first.session_id,
    )


def merge_mutations(mutations: Iterable[Mutation]) -> tuple[Mutation, ...]:
    """Fold every mutation of one entity into a single mutation, keeping first-seen order."""
    merged: dict[tuple[EntityKind, str], Mutation] = {}
    for mutation in mutations:
        existing = merged.get(mutation.key)
        merged[mutation.key] = mutation if existing is None else _combine(existing, mutation)
    return tuple(merged.values())


def chunk_transaction(transaction: Transaction, limit: int) -> list[Transaction]:
    if limit < 1:
        raise ValueError(f"Batch limit must be positive, got {limit}")
    mutations = merge_mutations(transaction.mutations)
    if len(mutations) <= limit:
        return [Transaction(mutations=mutations, description=transaction.description)]
    chunks: list[Transaction] = []
    total = (len(mutations) + limit - 1) // limit
    for index, start in enumerate(range(0, len(mutations), limit), start=1):
        chunks.append(
            Transaction(
                mutations=mutations[start : start + limit],
                description=f"{transaction.description} ({index}/{total})",
            )
        )
    return chunks
