"""Actions deferred by a number of cycles, such as moving the disk head."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass
class UpdatePhaseAction:
    """Move the head of a drive to a new phase."""

    drive_index: int
    phase_160: int


@dataclass
class MotorOffAction:
    """Stop the motor of a drive."""

    drive_index: int


CycleAction = Union[UpdatePhaseAction, MotorOffAction]


@dataclass
class ActionWrapper:
    """An action together with its remaining wait and whether it has run."""

    wait: int
    action: CycleAction
    has_run: bool = False


@dataclass
class Actions:
    """Queue of pending deferred actions."""

    actions: list[ActionWrapper] = field(default_factory=list)

    def add_action(self, wait: int, action: CycleAction) -> None:
        """Schedule ``action`` to run after ``wait`` cycles."""
        self.actions.append(ActionWrapper(wait=wait, action=action))

    def remove_motor_off_actions(self) -> None:
        """Cancel every pending motor-off action."""
        for wrapper in self.actions:
            if isinstance(wrapper.action, MotorOffAction):
                wrapper.has_run = True