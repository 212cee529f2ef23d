"""Enumerations stored as plain text tokens."""

from __future__ import annotations

from enum import Enum


class HabitType(str, Enum):
    YES_NO = "yes_no"
    MEASURABLE = "measurable"


class TargetType(str, Enum):
    AT_LEAST = "at_least"
    AT_MOST = "at_most"
    EXACTLY = "exactly"


class FrequencyType(str, Enum):
    EVERY_DAY = "every_day"
    EVERY_X_DAYS = "every_x_days"
    X_TIMES_PER_WEEK = "x_times_per_week"
    X_TIMES_PER_MONTH = "x_times_per_month"
    X_TIMES_IN_Y_DAYS = "x_times_in_y_days"


__all__ = ["FrequencyType", "HabitType", "TargetType"]
