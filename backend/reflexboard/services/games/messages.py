from typing import List, Tuple

# Ordered (upper bound, message); the first bound the time is below wins.
REACTION_MESSAGES: List[Tuple[int, str]] = [
    (150, "Superhuman! Are you a robot? 🤖"),
    (200, "Lightning fast! ⚡"),
    (250, "Incredible reflexes! 🔥"),
    (300, "Very quick! 💨"),
    (350, "Nice reaction! 👍"),
    (400, "Good job! 😊"),
    (500, "Not bad! Keep practicing 💪"),
]
FALLBACK_MESSAGE = "Room for improvement! Try again 🎯"


def reaction_message(reaction_time_ms: float) -> str:
    """Return the commentary shown for a measured reaction time."""
    for upper_bound, message in REACTION_MESSAGES:
        if reaction_time_ms < upper_bound:
            return message
    return FALLBACK_MESSAGE
