from gearguard.utils.fsm import TransitionValidator
from gearguard.errors import ImmutableStateError, WorkflowViolationError
from gearguard.services.transitions import REQUEST_FSM
import pytest


def test_transition_validator_allows_valid():
    fsm = TransitionValidator({'A': {'B'}, 'B': set()})
    assert fsm.assert_can_transition('A', 'B') is True


def test_transition_validator_blocks_invalid():
    fsm = TransitionValidator({'A': {'B'}, 'B': set()})
    with pytest.raises(WorkflowViolationError):
        fsm.assert_can_transition('A', 'C')


def test_transition_validator_terminal_is_immutable():
    fsm = TransitionValidator({'A': {'B'}, 'B': set()})
    assert fsm.terminal_states == {'B'}
    with pytest.raises(ImmutableStateError) as exc:
        fsm.assert_can_transition('B', 'A')
    assert exc.value.meta == {'current': 'B', 'target': 'A'}


def test_request_graph_shape():
    assert REQUEST_FSM.terminal_states == {'repaired', 'scrap'}
    assert REQUEST_FSM.assert_can_transition('new', 'in_progress')
    assert REQUEST_FSM.assert_can_transition('in_progress', 'scrap')
    # status never moves backwards
    with pytest.raises(WorkflowViolationError):
        REQUEST_FSM.assert_can_transition('in_progress', 'new')
