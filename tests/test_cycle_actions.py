from maple2.cycle_actions import (
    ActionWrapper,
    Actions,
    MotorOffAction,
    UpdatePhaseAction,
)


def test_add_action_appends_pending_wrapper():
    actions = Actions()
    action = UpdatePhaseAction(drive_index=1, phase_160=8)
    actions.add_action(5, action)
    assert actions.actions == [ActionWrapper(wait=5, action=action, has_run=False)]


def test_actions_keep_order():
    actions = Actions()
    actions.add_action(1, MotorOffAction(0))
    actions.add_action(2, UpdatePhaseAction(0, 4))
    assert [w.wait for w in actions.actions] == [1, 2]


def test_remove_motor_off_marks_only_motor_off():
    actions = Actions()
    actions.add_action(1, MotorOffAction(0))
    actions.add_action(1, UpdatePhaseAction(0, 4))
    actions.add_action(3, MotorOffAction(1))
    actions.remove_motor_off_actions()
    assert [w.has_run for w in actions.actions] == [True, False, True]


def test_new_queues_are_independent():
    first = Actions()
    second = Actions()
    first.add_action(0, MotorOffAction(0))
    assert len(second.actions) == 0