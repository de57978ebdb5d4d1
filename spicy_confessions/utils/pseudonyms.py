import random
from typing import Optional

ACTORS = [
    "Keanu Reeves",
    "Scarlett Johansson",
    "Tom Cruise",
    "Zendaya",
    "Ryan Gosling",
    "Emma Stone",
    "Dwayne Johnson",
    "Jennifer Lawrence",
    "Chris Hemsworth",
    "Margot Robbie",
    "Robert Downey Jr.",
    "Natalie Portman",
    "Leonardo DiCaprio",
    "Gal Gadot",
    "Michael B. Jordan",
    "Ana de Armas",
    "Timothée Chalamet",
    "Viola Davis",
    "Christian Bale",
    "Emily Blunt",
    "Pedro Pascal",
    "Florence Pugh",
    "Andrew Garfield",
    "Zoe Kravitz",
]

PREFIXES = ["Anon", "Totally-Not", "Definitely-Not", "Secret", "Agent", "Undercover"]

def random_pseudonym(rng: Optional[random.Random] = None) -> str:
    """Pick a display name that is obviously not the real actor"""
    rng = rng or random
    return f"{rng.choice(PREFIXES)} {rng.choice(ACTORS)}"
