import json
import logging
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

# Built-in translation dictionaries.
# Keys are language codes (ISO 639-1) -> mapping of English phrase -> translated phrase.
TRANSLATIONS = {
    "fr": {
        "My Recipe Journal": "Mon Journal de Recettes",
        "Search recipes...": "Rechercher des recettes...",
        "Main Courses": "Plats Principaux",
        "Desserts": "Desserts",
        "Soups": "Soupes",
        "Quick Recipes": "Recettes Rapides",
        "Vegetarian": "Végétarien",
        "All Recipes": "Toutes les Recettes",
        "Ingredients": "Ingrédients",
        "Instructions": "Instructions",
        "Back to Recipes": "Retour aux Recettes",
        "Dish Types": "Types de Plats",
        "Dietary Options": "Options Alimentaires",
        "Vegan": "Végétalien",
        "Gluten Free": "Sans Gluten",
        "Seitan Bourguignon": "Seitan Bourguignon",
        "Lentils Soup": "Soupe aux Lentilles",
        "Moussaka": "Moussaka",
        "Banana Bread": "Pain aux Bananes",
        "Chocolate Truffles": "Truffes au Chocolat",
        "Rice Pudding": "Pudding au Riz",
    },
    "es": {
        "My Recipe Journal": "Mi Diario de Recetas",
        "Search recipes...": "Buscar recetas...",
        "Main Courses": "Platos Principales",
        "Desserts": "Postres",
        "Soups": "Sopas",
        "Quick Recipes": "Recetas Rápidas",
        "Vegetarian": "Vegetariano",
        "All Recipes": "Todas las Recetas",
        "Ingredients": "Ingredientes",
        "Instructions": "Instrucciones",
        "Back to Recipes": "Volver a las Recetas",
        "Dish Types": "Tipos de Platos",
        "Dietary Options": "Opciones Dietéticas",
        "Vegan": "Vegano",
        "Gluten Free": "Sin Gluten",
        "Seitan Bourguignon": "Seitan Bourguignon",
        "Lentils Soup": "Sopa de Lentejas",
        "Moussaka": "Moussaka",
        "Banana Bread": "Pan de Plátano",
        "Chocolate Truffles": "Trufas de Chocolate",
        "Rice Pudding": "Pudín de Arroz",
    },
    "de": {
        "My Recipe Journal": "Mein Rezeptjournal",
        "Search recipes...": "Rezepte suchen...",
        "Main Courses": "Hauptgerichte",
        "Desserts": "Desserts",
        "Soups": "Suppen",
        "Quick Recipes": "Schnelle Rezepte",
        "Vegetarian": "Vegetarisch",
        "All Recipes": "Alle Rezepte",
        "Ingredients": "Zutaten",
        "Instructions": "Zubereitung",
        "Seitan Bourguignon": "Seitan Bourguignon",
        "Lentils Soup": "Linsensuppe",
        "Moussaka": "Moussaka",
        "Banana Bread": "Bananenbrot",
        "Chocolate Truffles": "Schokoladentrüffel",
        "Rice Pudding": "Reispudding",
    },
    "it": {
        "My Recipe Journal": "Il Mio Diario di Ricette",
        "Search recipes...": "Cerca ricette...",
        "Main Courses": "Piatti Principali",
        "Desserts": "Dolci",
        "Soups": "Zuppe",
        "Quick Recipes": "Ricette Veloci",
        "Vegetarian": "Vegetariano",
        "All Recipes": "Tutte le Ricette",
        "Seitan Bourguignon": "Seitan Bourguignon",
        "Lentils Soup": "Zuppa di Lenticchie",
        "Moussaka": "Moussaka",
        "Banana Bread": "Pane alle Banane",
        "Chocolate Truffles": "Tartufi al Cioccolato",
        "Rice Pudding": "Budino di Riso",
    },
    "pt": {
        "My Recipe Journal": "Meu Diário de Receitas",
        "Search recipes...": "Pesquisar receitas...",
        "Main Courses": "Pratos Principais",
        "Desserts": "Sobremesas",
        "Soups": "Sopas",
        "Quick Recipes": "Receitas Rápidas",
        "Vegetarian": "Vegetariano",
        "All Recipes": "Todas as Receitas",
    },
    "nl": {
        "My Recipe Journal": "Mijn Recepten Dagboek",
        "Search recipes...": "Recepten zoeken...",
        "Main Courses": "Hoofdgerechten",
        "Desserts": "Desserts",
        "Soups": "Soepen",
        "Quick Recipes": "Snelle Recepten",
        "Vegetarian": "Vegetarisch",
        "All Recipes": "Alle Recepten",
    },
}


def lookup(dictionaries: Dict[str, Dict[str, str]], text: str, lang: str) -> Optional[str]:
    """Return the dictionary entry for ``text`` in ``lang`` or None on a miss."""
    if not lang:
        return None
    mapping = dictionaries.get(lang.lower())
    if not mapping:
        return None
    # exact match first, then lowercase, then capitalized (for headings)
    key = text.strip()
    if key in mapping:
        return mapping[key]
    lower = key.lower()
    if lower in mapping:
        return mapping[lower]
    cap = key.capitalize()
    if cap in mapping:
        return mapping[cap]
    return None


def load_dictionaries(path=None) -> Dict[str, Dict[str, str]]:
    """Load dictionaries from a ``translations.json`` file.

    Falls back to the embedded ``TRANSLATIONS`` when the file is missing or
    malformed.
    """
    if path is None:
        return TRANSLATIONS
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load translation database {p}, using embedded dictionaries: {e}")
        return TRANSLATIONS
    if not isinstance(data, dict):
        logger.warning(f"Translation database {p} is not a mapping, using embedded dictionaries")
        return TRANSLATIONS
    return {
        lang: {str(k): str(v) for k, v in entries.items()}
        for lang, entries in data.items()
        if isinstance(entries, dict)
    }
