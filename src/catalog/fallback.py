"""
Hangman - Built-in Word Catalog

Playable catalog used when neither the provider nor the cache can
supply one.
"""

FALLBACK_CATALOG: dict[str, dict[str, list[str]]] = {
    "easy": {
        "animals": ["cat", "dog", "bird", "fish", "lion", "bear", "wolf", "deer"],
        "colors": ["red", "blue", "green", "yellow", "black", "white", "pink", "purple"],
        "food": ["pizza", "cake", "soup", "rice", "meat", "milk", "bread", "cheese"],
    },
    "medium": {
        "animals": [
            "elephant", "giraffe", "penguin", "dolphin",
            "tiger", "eagle", "shark", "butterfly",
        ],
        "countries": [
            "france", "germany", "japan", "brazil",
            "canada", "australia", "italy", "spain",
        ],
        "food": ["burger", "pasta", "salad", "sushi", "tacos", "curry", "pizza", "sandwich"],
    },
    "hard": {
        "animals": ["rhinoceros", "hippopotamus", "orangutan", "chameleon", "platypus", "armadillo"],
        "science": [
            "photosynthesis", "metamorphosis", "chromosome",
            "molecule", "ecosystem", "laboratory",
        ],
        "literature": ["shakespeare", "hemingway", "dickens", "tolkien", "austen", "twain"],
    },
}


def fallback_catalog() -> dict[str, dict[str, list[str]]]:
    """Fresh copy of the built-in catalog."""
    return {
        difficulty: {category: list(words) for category, words in categories.items()}
        for difficulty, categories in FALLBACK_CATALOG.items()
    }
