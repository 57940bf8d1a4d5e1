"""Enum definitions shared across the pairing and notification code."""

import enum


class PairingState(str, enum.Enum):
    idle = "idle"
    scheduled = "scheduled"
    firing = "firing"
    completed = "completed"


class MessageKind(str, enum.Enum):
    registration_confirmation = "registration_confirmation"
    assignment_notice = "assignment_notice"
