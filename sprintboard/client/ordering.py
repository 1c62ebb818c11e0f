"""Drag and drop move planning.

Two cases:

* cross-column: the card is appended to the destination column, its order
  becomes the destination's current card count.
* same column with a target position: the column is re-sorted by order,
  the card is pulled out and re-inserted at the (clamped) position, and every
  card is renumbered 0..n-1. One update per card.

Same column without a position plans nothing.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence

from sprintboard.client.projection import Card, Column


class MoveError(ValueError):
    """The move refers to a card or column missing from the snapshot."""


@dataclass(frozen=True)
class OrderUpdate:
    card_id: int
    order: int
    column_id: Optional[int] = None  # set only when the card changes column


def _find_column(columns: Sequence[Column], column_id: int) -> Column:
    for column in columns:
        if column.id == column_id:
            return column
    raise MoveError(f"Column {column_id} is not on the board")


def sorted_cards(cards: Sequence[Card]) -> List[Card]:
    # stable: equal or missing orders keep their current sequence
    return sorted(cards, key=lambda c: c.order if c.order is not None else 0)


def plan_move(
    columns: Sequence[Column],
    card_id: int,
    from_column_id: int,
    to_column_id: int,
    new_position: Optional[int] = None,
) -> List[OrderUpdate]:
    source = _find_column(columns, from_column_id)
    if not any(c.id == card_id for c in source.cards):
        raise MoveError(f"Card {card_id} is not in column {from_column_id}")

    if from_column_id != to_column_id:
        destination = _find_column(columns, to_column_id)
        return [OrderUpdate(card_id=card_id, order=len(destination.cards), column_id=to_column_id)]

    if new_position is None:
        return []

    cards = sorted_cards(source.cards)
    index = next(i for i, c in enumerate(cards) if c.id == card_id)
    moved = cards.pop(index)
    position = max(0, min(new_position, len(cards)))
    cards.insert(position, moved)

    return [OrderUpdate(card_id=c.id, order=i) for i, c in enumerate(cards)]


def apply_updates(columns: Sequence[Column], updates: Sequence[OrderUpdate]) -> List[Column]:
    """Return a new snapshot with the planned updates applied locally.

    Used for the optimistic redraw; the next refresh overwrites it.
    """
    by_card = {u.card_id: u for u in updates}
    moving = {}
    result = []
    for column in columns:
        kept = []
        for card in column.cards:
            update = by_card.get(card.id)
            if update is None:
                kept.append(card)
                continue
            changed = card.model_copy(update={
                "order": update.order,
                "column_id": update.column_id if update.column_id is not None else card.column_id,
            })
            if update.column_id is not None and update.column_id != column.id:
                moving[update.column_id] = moving.get(update.column_id, []) + [changed]
            else:
                kept.append(changed)
        result.append(column.model_copy(update={"cards": kept}))

    return [
        c.model_copy(update={"cards": sorted_cards(c.cards + moving.get(c.id, []))})
        for c in result
    ]
