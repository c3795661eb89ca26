"""
Fantasy Name Domain Service.

Assigns per-session display names ("Brave Dragon") to participants and
validates names chosen by diners. Pure: it never touches the database. The
caller passes the names already taken, read inside its own transaction.
"""

import random
from collections.abc import Collection
from itertools import product
from typing import Protocol

from shared.config.settings import settings


ADJECTIVES: tuple[str, ...] = (
    "Brave", "Swift", "Mighty", "Noble", "Wise", "Bold", "Fierce", "Gentle",
    "Clever", "Strong", "Graceful", "Daring", "Radiant", "Mysterious", "Valiant",
    "Serene", "Cunning", "Majestic", "Spirited", "Elegant", "Fearless",
    "Brilliant", "Charming", "Adventurous", "Loyal", "Enchanted", "Golden",
    "Silver", "Crimson", "Azure", "Emerald", "Violet", "Amber", "Celestial",
    "Ancient", "Legendary", "Mystical", "Ethereal", "Divine", "Cosmic",
)

NOUNS: tuple[str, ...] = (
    "Dragon", "Phoenix", "Griffin", "Unicorn", "Wolf", "Eagle", "Lion", "Tiger",
    "Bear", "Fox", "Raven", "Falcon", "Hawk", "Owl", "Panther", "Leopard",
    "Jaguar", "Lynx", "Stag", "Elk", "Knight", "Warrior", "Mage", "Archer",
    "Paladin", "Ranger", "Bard", "Sage", "Scholar", "Monk", "Star", "Moon",
    "Sun", "Comet", "Nova", "Galaxy", "Nebula", "Cosmos", "Void", "Flame",
    "Storm", "Thunder", "Lightning", "Wind", "Earth", "Stone", "Crystal",
    "Diamond", "Ruby", "Sapphire",
)

# Punctuation a diner may use besides letters, digits and single spaces
ALLOWED_PUNCTUATION = frozenset("'-.!?")


class NameAssigner(Protocol):
    """Anything that can pick and check participant display names."""

    def generate(self, existing_names: Collection[str]) -> str: ...

    def validate(self, name: str) -> bool: ...


class FantasyNameService:
    """
    Generates collision-free "<Adjective> <Noun>" names.

    Random tries first; when those keep colliding the whole adjective/noun
    space is walked in shuffled order, and once that is exhausted a numeric
    suffix is appended. Always terminates.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        max_attempts: int | None = None,
        max_length: int | None = None,
    ):
        self._rng = rng or random.Random()
        self._max_attempts = max_attempts or settings.fantasy_name_max_attempts
        self._max_length = max_length or settings.fantasy_name_max_length

    def _random_name(self) -> str:
        return f"{self._rng.choice(ADJECTIVES)} {self._rng.choice(NOUNS)}"

    def generate(self, existing_names: Collection[str]) -> str:
        """
        Return a name not present in existing_names.

        Args:
            existing_names: Names currently used in the session

        Returns:
            A fresh fantasy name
        """
        taken = set(existing_names)

        for _ in range(self._max_attempts):
            candidate = self._random_name()
            if candidate not in taken:
                return candidate

        combinations = list(product(ADJECTIVES, NOUNS))
        self._rng.shuffle(combinations)
        for adjective, noun in combinations:
            candidate = f"{adjective} {noun}"
            if candidate not in taken:
                return candidate

        # Every base name is in use; at most len(taken) suffixes can collide
        base = self._random_name()
        suffix = 2
        while f"{base} {suffix}" in taken:
            suffix += 1
        return f"{base} {suffix}"

    @staticmethod
    def normalize(name: str) -> str:
        """Stored form of a user-supplied name."""
        return name.strip()

    def validate(self, name: str) -> bool:
        """
        Check a user-supplied name.

        Valid names (after stripping) are 1 to max_length characters long,
        start with a letter or digit, contain only letters, digits, single
        spaces and ' - . ! ? and no control characters.
        """
        if not isinstance(name, str):
            return False

        name = self.normalize(name)
        if not name or len(name) > self._max_length:
            return False
        if not name[0].isalnum():
            return False
        if "  " in name:
            return False

        for char in name:
            if char.isalnum() or char == " " or char in ALLOWED_PUNCTUATION:
                continue
            return False
        return True


# Singleton used by the coordinators
fantasy_name_service = FantasyNameService()
