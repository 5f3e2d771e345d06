"""Simple finite state machine utility for enforcing allowed status transitions.

Designed for lightweight lifecycle models (MaintenanceRequest).
Usage:
    from gearguard.utils.fsm import TransitionValidator
    REQUEST_FSM = TransitionValidator({
        'new': {'in_progress'},
        'in_progress': {'repaired'},
        'repaired': set(),
    })
    REQUEST_FSM.assert_can_transition(current_status, target_status)

States with no outgoing edges are terminal: leaving one raises
ImmutableStateError, any other missing edge raises WorkflowViolationError.
"""
from __future__ import annotations
from typing import Dict, Set
from gearguard.errors import ImmutableStateError, WorkflowViolationError

class TransitionValidator:
    def __init__(self, graph: Dict[str, Set[str]], field_name: str = 'status'):
        self.graph = graph
        self.field_name = field_name

    @property
    def terminal_states(self) -> Set[str]:
        return {state for state, targets in self.graph.items() if not targets}

    def is_terminal(self, state: str) -> bool:
        return state in self.terminal_states

    def assert_can_transition(self, current: str, target: str):
        if self.is_terminal(current):
            raise ImmutableStateError(
                f"{self.field_name} {current} is final",
                meta={'current': current, 'target': target},
            )
        allowed = self.graph.get(current, set())
        if target not in allowed:
            raise WorkflowViolationError(
                f"Invalid {self.field_name} transition {current} -> {target}",
                meta={'current': current, 'target': target},
            )
        return True

__all__ = ['TransitionValidator']
