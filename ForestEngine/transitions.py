"""Transition tables for the session and tree state machines."""

from typing import Dict, Set, Tuple

from .enums import SessionEvent, SessionStatus, TreeStatus


class InvalidTransitionError(Exception):
    """Raised when a state machine is asked for a transition not in its table"""
    pass


SESSION_TRANSITIONS: Dict[Tuple[SessionStatus, SessionEvent], SessionStatus] = {
    (SessionStatus.IDLE, SessionEvent.START): SessionStatus.ACTIVE,
    (SessionStatus.ENDED, SessionEvent.START): SessionStatus.ACTIVE,
    (SessionStatus.ACTIVE, SessionEvent.PAUSE): SessionStatus.PAUSED,
    (SessionStatus.PAUSED, SessionEvent.RESUME): SessionStatus.ACTIVE,
    (SessionStatus.ACTIVE, SessionEvent.END): SessionStatus.ENDED,
    (SessionStatus.PAUSED, SessionEvent.END): SessionStatus.ENDED,
}

TREE_TRANSITIONS: Dict[TreeStatus, Set[TreeStatus]] = {
    TreeStatus.HEALTHY: {TreeStatus.BURNING},
    TreeStatus.BURNING: {TreeStatus.BURNT, TreeStatus.RECOVERING},
    TreeStatus.RECOVERING: {TreeStatus.HEALTHY},
    TreeStatus.BURNT: set(),
}


def next_session_status(current: SessionStatus, event: SessionEvent) -> SessionStatus:
    """Looks up the session transition table, raising if the move is illegal."""
    try:
        return SESSION_TRANSITIONS[(current, event)]
    except KeyError:
        raise InvalidTransitionError(
            f"Cannot {event.value} a session that is {current.value}"
        ) from None


def can_transition_tree(current: TreeStatus, target: TreeStatus) -> bool:
    return target in TREE_TRANSITIONS[current]


def transition_tree(tree, target: TreeStatus) -> None:
    """
    Moves a tree to a new status and keeps burn_intensity and recovery
    consistent with it.

    burn_intensity is only defined while a tree is burning and recovery only
    while it is recovering. A salvaged tree starts its recovery at whatever
    share the fire left unburnt.
    """
    if not can_transition_tree(tree.status, target):
        raise InvalidTransitionError(
            f"Tree {tree.id} cannot go from {tree.status.value} to {target.value}"
        )
    tree.recovery = 1 - (tree.burn_intensity or 0.0) if target == TreeStatus.RECOVERING else None
    tree.status = target
    if target != TreeStatus.BURNING:
        tree.burn_intensity = None
