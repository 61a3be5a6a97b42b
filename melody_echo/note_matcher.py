import re

from .logger import get_logger

# Get logger for this module
logger = get_logger(__name__)

# Compile regex to extract note name and octave
# This pattern matches:
# - Note name (A-G, case insensitive)
# - Optional sharp
# - Optional octave number (possibly negative)
NOTE_PATTERN = re.compile(r"^([A-Ga-g]#?)(-?[0-9]*)$")


class NoteMatcher:
    """
    Encapsulates logic for comparing detected notes to target notes.

    Two notes match when their pitch class and octave agree after the
    notation slash and any sharp have been removed, so 'C#/4', 'C#4',
    'C/4' and 'C4' are all the same note class.
    """

    @staticmethod
    def normalize(note: str) -> str:
        """Reduce a note to its comparison form ('C#/4' -> 'C4')."""
        return str(note).strip().replace("/", "").replace("#", "").upper()

    @classmethod
    def match(cls, target: str, played: str) -> bool:
        """
        Check if the played note matches the target note, including octave.

        Args:
            target: The target note (e.g., 'C/4', 'F#4')
            played: The played note (e.g., 'C4', 'F4')
        Returns:
            bool: True if the notes are the same note class, False otherwise
        """
        if not target or not played:
            logger.debug(f"Empty input - Target: '{target}', Played: '{played}'")
            return False

        normalized_target = cls.normalize(target)
        normalized_played = cls.normalize(played)

        target_match = NOTE_PATTERN.match(normalized_target)
        played_match = NOTE_PATTERN.match(normalized_played)

        if not target_match or not played_match:
            logger.warning(
                f"Invalid note format - Target: '{target}' (match: {bool(target_match)}), "
                f"Played: '{played}' (match: {bool(played_match)})"
            )
            return False

        # Both sides need an octave; an octave-less note is never a match here
        if not target_match.group(2) or not played_match.group(2):
            logger.debug(f"Missing octave - Target: '{target}', Played: '{played}'")
            return False

        matched = target_match.groups() == played_match.groups()
        logger.debug(
            f"Matching '{normalized_target}' vs '{normalized_played}' -> "
            f"{'MATCH' if matched else 'NO MATCH'}"
        )
        return matched
