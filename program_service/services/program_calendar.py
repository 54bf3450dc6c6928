"""Mapping between program day numbers, calendar dates and the 14-day template."""

from __future__ import annotations

from datetime import date, timedelta

from ..schemas.blueprint import MICROCYCLE_LENGTH_DAYS, PROGRAM_LENGTH_DAYS
from ..schemas.program import Program
from ..schemas.template import DailyMacroTargets, TrainingDay


def template_day_index(
    day_number: int,
    *,
    program_length_days: int = PROGRAM_LENGTH_DAYS,
    microcycle_length_days: int = MICROCYCLE_LENGTH_DAYS,
) -> int:
    if not 1 <= day_number <= program_length_days:
        raise ValueError(f"day_number must be within 1..{program_length_days}, got {day_number}")
    return ((day_number - 1) % microcycle_length_days) + 1


def scheduled_date(start_date: date, day_number: int) -> date:
    return start_date + timedelta(days=day_number - 1)


def day_number_for_date(program: Program, on: date) -> int | None:
    offset = (on - program.start_date).days
    if offset < 0 or offset >= program.program_length_days:
        return None
    return offset + 1


def date_for_day_number(program: Program, day_number: int) -> date | None:
    if not 1 <= day_number <= program.program_length_days:
        return None
    return scheduled_date(program.start_date, day_number)


def training_for_day(program: Program, day_number: int) -> TrainingDay | None:
    if not 1 <= day_number <= program.program_length_days:
        return None
    return program.template.day(template_day_index(day_number, program_length_days=program.program_length_days))


def nutrition_for_day(program: Program, day_number: int) -> DailyMacroTargets | None:
    # One macro target covers every day of the program.
    if not 1 <= day_number <= program.program_length_days:
        return None
    return program.template.nutrition.daily_macro_targets


def program_date_range(program: Program) -> tuple[date, date]:
    return program.start_date, scheduled_date(program.start_date, program.program_length_days)


def is_date_in_program(program: Program, on: date) -> bool:
    start, end = program_date_range(program)
    return start <= on <= end
