"""
Profanity mask for community messages.
Whole-word, case-insensitive; each banned word becomes the same number of mask characters.
"""
import re

PROFANITY_LIST = ("fuck", "shit", "ass", "bitch", "damn", "dick", "bastard", "crap", "hell")
MASK_CHAR = "*"

_PATTERN = re.compile(
    r"\b(?:" + "|".join(re.escape(word) for word in PROFANITY_LIST) + r")\b",
    re.IGNORECASE,
)


def filter_profanity(text: str) -> str:
    return _PATTERN.sub(lambda match: MASK_CHAR * len(match.group(0)), text)
