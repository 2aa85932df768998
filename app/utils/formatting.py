"""
Display helpers. Nothing here is used to derive meaning from a table name.
"""

import re
from datetime import date

DAYS_OF_WEEK = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def day_name(value: date) -> str:
    return DAYS_OF_WEEK[value.isoweekday() % 7]


def format_batch_name(table_name: str) -> str:
    """basic1_1_schedule -> Basic 1.1"""
    name = table_name.replace("_schedule", "", 1)
    name = re.sub(r"([a-zA-Z])(\d)", r"\1 \2", name, count=1)
    name = name.replace("_", ".")
    return name[:1].upper() + name[1:]
