# asobot/line/messages.py
"""Plain-text bodies for the group notifications."""

import random

HEADER = "🎩 From Asobot"


def schedule_start(title, url):
    return (
        f"{HEADER}\n\n"
        f"📋 Scheduling has started for \"{title}\".\n\n"
        "Please let us know which dates work for you.\n\n"
        f"▼ Answer here\n{url}"
    )


def confirm_start(title, date_str, url):
    return (
        f"{HEADER}\n\n"
        f"📋 Attendance check has started for \"{title}\".\n\n"
        f"📅 {date_str}\n\n"
        "Please let us know if you can make it.\n\n"
        f"▼ Answer here\n{url}"
    )


def reminder(title, days_left, kind, url):
    label = "scheduling poll" if kind == 'schedule' else "attendance check"
    urgency = "closes tomorrow" if days_left == 1 else f"closes in {days_left} days"
    return (
        f"{HEADER}\n\n"
        f"⏰ The {label} for \"{title}\" {urgency}.\n\n"
        "If you haven't answered yet, please do so soon.\n\n"
        f"▼ Answer here\n{url}"
    )


def date_confirmed(title, date_str):
    return (
        f"{HEADER}\n\n"
        f"📅 The date for \"{title}\" is set.\n\n"
        f"{date_str}\n\n"
        "We look forward to seeing everyone there."
    )


_SUGGESTION_PATTERNS = (
    "Here are the places everyone wants to go.\n\n{list}\n\n"
    "Why not start a scheduling poll?\nLet's turn \"someday\" into \"this day\".",
    "Looks like things are heating up.\n\n{list}\n\n"
    "The wishes are piling up. Time to pick a date?",
    "More people want to go than you might think.\n\n{list}\n\n"
    "Plans start moving once someone speaks up. Care to organise?",
)

_EMPTY_PATTERNS = (
    "We wanted to share today's picks, but nobody has added a wish yet.\n\n"
    "\"Let's go someday\" has a way of never happening.\nTell us where you want to go!",
    "The wish list is still empty.\n\n"
    "Add a place the moment you think of it, before \"someday\" becomes \"never\".",
    "The list is quiet today.\n\nWhere would you like to go? Add one wish to get started.",
)


def suggestion(popular, url):
    """*popular* is a list of (title, interest_count) pairs."""
    lines = "\n".join(f"・\"{title}\" {count} interested" for title, count in popular)
    body = random.choice(_SUGGESTION_PATTERNS).format(list=lines)
    return f"{HEADER}\n\n{body}\n\n▼ Wish list\n{url}"


def suggestion_empty(url):
    return f"{HEADER}\n\n{random.choice(_EMPTY_PATTERNS)}\n\n▼ Wish list\n{url}"
