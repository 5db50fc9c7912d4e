"""
Recipe Diversity - Name Normalization.

Table-driven mapping of free-text tags (English and Turkish) onto coarse
buckets so that "tavuk göğsü" and "chicken thighs" count as the same
protein. Extend a locale by adding synonyms to the tables; scoring code
never needs to change.
"""

import re

from recipe_diversity.models.entities import IngredientEntry, ingredient_name


# =============================================================================
# Bucket Tables
# =============================================================================

# Ordered: the first bucket with a matching synonym wins, so more specific
# buckets sit before the ones whose synonyms they contain ("stir-fry" before "fry").
PROTEIN_BUCKETS: dict[str, tuple[str, ...]] = {
    "chicken": ("chicken", "tavuk", "piliç"),
    "turkey": ("turkey", "hindi"),
    "lamb": ("lamb", "mutton", "kuzu"),
    "beef": ("beef", "veal", "steak", "burger", "hamburger", "dana", "sığır", "kıyma", "köfte", "bonfile"),
    "seafood": ("shrimp", "prawn", "squid", "mussel", "karides", "kalamar", "midye"),
    "fish": (
        "fish", "salmon", "tuna", "cod", "sea bass", "sardine", "anchovy",
        "balık", "somon", "ton balığı", "levrek", "çipura", "hamsi", "sardalya",
    ),
    "pork": ("pork", "bacon", "ham", "domuz"),
    "vegetarian": (
        "vegetarian", "vegan", "tofu", "tempeh", "edamame", "lentil", "chickpea", "bean",
        "eggplant", "aubergine", "mushroom",
        "vejetaryen", "sebze", "mercimek", "nohut", "fasulye", "barbunya", "patlıcan", "mantar",
    ),
    "eggs": ("egg", "yumurta"),
    "dairy": ("cheese", "yogurt", "yoghurt", "kefir", "peynir", "yoğurt", "lor"),
}

COOKING_METHOD_BUCKETS: dict[str, tuple[str, ...]] = {
    "stir-fry": (
        "stir-fry", "stir fry", "stir-fried", "stir fried", "stirfry", "wok",
        "sauté", "saute", "sote", "kavurma",
    ),
    "slow-cooking": ("slow cook", "slow-cook", "yavaş pişir"),
    "braising": ("braise", "stew", "güveç", "yahni", "tencere"),
    "roasting": ("roast", "közleme", "köz"),
    "baking": ("bake", "baking", "oven", "fırın"),
    # str.lower() turns "I" into "i", not "ı"
    "grilling": ("grill", "barbecue", "bbq", "ızgara", "izgara", "mangal"),
    "steaming": ("steam", "buhar"),
    "boiling": ("boil", "simmer", "poach", "haşla", "kaynat"),
    "frying": ("fry", "fried", "kızart", "tava"),
    "raw": ("raw", "no-cook", "no cook", "çiğ", "pişirmeden"),
}

# Reference vocabularies for underrepresentation checks
REFERENCE_CUISINES: tuple[str, ...] = (
    "turkish", "mediterranean", "italian", "greek", "french",
    "spanish", "middle eastern", "indian", "chinese", "japanese",
    "thai", "korean", "vietnamese", "mexican", "american",
)
REFERENCE_PROTEINS: tuple[str, ...] = tuple(PROTEIN_BUCKETS)
REFERENCE_COOKING_METHODS: tuple[str, ...] = tuple(COOKING_METHOD_BUCKETS)

# Ingredients too common to say anything about a recipe's identity
PANTRY_STOPLIST: frozenset[str] = frozenset({
    "salt", "pepper", "black pepper", "water", "oil", "olive oil", "vegetable oil",
    "sugar", "flour", "butter",
    "tuz", "karabiber", "biber salçası", "su", "yağ", "zeytinyağı", "sıvı yağ",
    "şeker", "un", "tereyağı",
})

# Classification tables for variety suggestions
PROTEIN_INGREDIENTS: frozenset[str] = frozenset({
    "tavuk", "tavuk göğsü", "tavuk but", "hindi",
    "somon", "ton balığı", "levrek", "çipura", "hamsi", "sardalya", "karides",
    "dana eti", "kuzu eti", "kıyma", "köfte",
    "yumurta", "beyaz peynir", "lor peyniri", "süzme yoğurt", "kefir",
    "tofu", "tempeh", "edamame",
    "kırmızı mercimek", "yeşil mercimek", "nohut", "fasulye", "barbunya",
    "chicken", "chicken breast", "salmon", "tuna", "shrimp", "beef", "lamb", "egg", "eggs",
    "lentils", "chickpeas",
})

PROTEIN_KEYWORDS: tuple[str, ...] = (
    "balık", "tavuk", "peynir", "yoğurt", "mercimek", "fasulye", "nohut",
    "chicken", "fish", "beef", "lamb", "cheese",
)

VEGETABLE_INGREDIENTS: frozenset[str] = frozenset({
    "brokoli", "karnabahar", "lahana", "brüksel lahanası",
    "ıspanak", "roka", "marul", "semizotu", "tere",
    "domates", "salatalık", "biber", "sivri biber", "çarliston biber",
    "patlıcan", "kabak", "bal kabağı",
    "havuç", "kereviz", "kereviz sapı",
    "mantar", "kestane mantarı", "portobello",
    "kuşkonmaz", "pırasa", "soğan", "yeşil soğan", "sarımsak",
    "bamya", "taze fasulye", "bezelye", "mısır",
    "broccoli", "cauliflower", "cabbage", "spinach", "arugula", "lettuce",
    "tomato", "cucumber", "bell pepper", "eggplant", "zucchini", "pumpkin",
    "carrot", "celery", "mushroom", "asparagus", "leek", "onion", "garlic",
    "okra", "green beans", "peas", "corn",
})

# Common plural/variant spellings folded onto one name
INGREDIENT_ALIASES: dict[str, str] = {
    "piliç": "tavuk",
    "domatesler": "domates",
    "brokoliler": "brokoli",
    "tomatoes": "tomato",
    "onions": "onion",
    "mushrooms": "mushroom",
    "carrots": "carrot",
}

# Character class body for the Latin and Turkish alphabets
LETTERS = "a-zçğıöşüâîû"
_NON_ALPHA = re.compile(rf"[^{LETTERS}\s]")


# =============================================================================
# Normalizers
# =============================================================================


def turkish_lower(value: str) -> str:
    """Lowercase without the combining dot str.lower() leaves after "İ"."""
    return value.replace("İ", "i").lower()


def normalize_tag(value: str | None) -> str | None:
    """Lowercase and collapse whitespace. Blank tags count as missing."""
    if value is None:
        return None
    normalized = " ".join(turkish_lower(value).strip().split())
    return normalized or None


def _compile_buckets(table: dict[str, tuple[str, ...]]) -> list[tuple[str, re.Pattern]]:
    # Synonyms match at the start of a word: "ham" hits "ham hock" but not "hamsi"
    return [
        (bucket, re.compile(rf"(?<![{LETTERS}])(?:{'|'.join(map(re.escape, synonyms))})"))
        for bucket, synonyms in table.items()
    ]


_PROTEIN_PATTERNS = _compile_buckets(PROTEIN_BUCKETS)
_METHOD_PATTERNS = _compile_buckets(COOKING_METHOD_BUCKETS)


def _match_bucket(value: str | None, patterns: list[tuple[str, re.Pattern]]) -> str | None:
    normalized = normalize_tag(value)
    if normalized is None:
        return None
    for bucket, pattern in patterns:
        if pattern.search(normalized):
            return bucket
    # Unknown values still compare against themselves
    return normalized


def normalize_protein(value: str | None) -> str | None:
    """
    Map a protein description onto its bucket.

    Examples:
        normalize_protein("Tavuk göğsü") -> "chicken"
        normalize_protein("Grilled salmon fillet") -> "fish"
        normalize_protein("Seitan") -> "seitan"
    """
    return _match_bucket(value, _PROTEIN_PATTERNS)


def normalize_cooking_method(value: str | None) -> str | None:
    """
    Map a cooking method description onto its bucket.

    Examples:
        normalize_cooking_method("Fırında") -> "baking"
        normalize_cooking_method("Stir-fried") -> "stir-fry"
    """
    return _match_bucket(value, _METHOD_PATTERNS)


def normalize_ingredient(entry: IngredientEntry) -> str:
    """
    Canonical ingredient name for overlap comparison.

    Lowercases, strips anything outside the Latin/Turkish alphabet and
    folds known aliases. Returns "" when nothing alphabetic remains.
    """
    name = turkish_lower(ingredient_name(entry))
    name = _NON_ALPHA.sub(" ", name)
    name = " ".join(name.split())
    return INGREDIENT_ALIASES.get(name, name)


def distinguishing_ingredients(entries: list[IngredientEntry]) -> set[str]:
    """Normalized ingredient set with pantry staples and blanks removed."""
    names = {normalize_ingredient(entry) for entry in entries}
    return {name for name in names if name and name not in PANTRY_STOPLIST}


def classify_ingredient(name: str) -> str:
    """Classify a normalized ingredient as "protein", "vegetable" or "other"."""
    if name in PROTEIN_INGREDIENTS:
        return "protein"
    if any(keyword in name for keyword in PROTEIN_KEYWORDS):
        return "protein"
    if name in VEGETABLE_INGREDIENTS:
        return "vegetable"
    return "other"
