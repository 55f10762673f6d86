"""System prompts and templates for LLM players."""

import random
from typing import Optional

# Personality trait pairs (one from each pair is chosen)
PERSONALITY_TRAITS = {
    "depth": ["deep thinker", "quick thinker"],
    "risk": ["cautious", "bold"],
    "view": ["contrarian", "conformist"],
}


def generate_personality(rng: Optional[random.Random] = None) -> list[str]:
    """Generate 1-2 random personality traits."""
    rng = rng or random.Random()
    categories = list(PERSONALITY_TRAITS.keys())
    selected = rng.sample(categories, k=rng.randint(1, 2))
    return [rng.choice(PERSONALITY_TRAITS[cat]) for cat in selected]


def get_personality_description(traits: list[str]) -> str:
    """Convert trait list to natural language description."""
    descriptions = {
        "deep thinker": "You reason several steps about what the others will do",
        "quick thinker": "You go with your first reasonable estimate",
        "cautious": "You avoid extreme numbers",
        "bold": "You are willing to pick extreme numbers",
        "contrarian": "You expect the crowd to be wrong",
        "conformist": "You expect the others to reason like the crowd",
    }
    described = [descriptions[t] for t in traits if t in descriptions]
    return ". ".join(described) + "." if described else ""


SYSTEM_PROMPT = """You are {player_name}, a player in the "2/3 of the average" game.

RULES:
- Every player secretly picks a whole number from 0 to 1000.
- The target is two thirds of the average of all revealed numbers, rounded down.
- The player closest to the target wins the pot, ties are decided at random.

{personality}

Answer with your reasoning in at most two sentences, then the number alone
on the last line."""


GUESS_PROMPT = """{context}

Which number do you pick?"""


def build_system_prompt(player_name: str, personality_traits: list[str]) -> str:
    """Build the system prompt for a player."""
    return SYSTEM_PROMPT.format(
        player_name=player_name,
        personality=get_personality_description(personality_traits),
    ).strip()
