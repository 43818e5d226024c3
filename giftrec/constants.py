"""Default lookup tables for relationship profiling and catalog scoring.

Values are plain tuples and strings. Services never read these directly at
call time; they are copied into immutable config structures
(see ``ProfilerConfig.default()``) so tests can inject their own tables.
"""

# canonical label -> (intimacy, formality, emotional connection, (budget min, budget max))
RELATIONSHIP_DEFAULTS = {
    "spouse": ("very_close", "casual", "high", (75, 300)),
    "romantic_partner": ("very_close", "casual", "high", (50, 250)),
    "parent": ("close", "neutral", "high", (40, 200)),
    "child": ("close", "casual", "high", (25, 150)),
    "sibling": ("close", "casual", "high", (30, 150)),
    "grandparent": ("close", "formal", "high", (30, 150)),
    "grandchild": ("close", "casual", "high", (20, 100)),
    "extended_family": ("casual", "neutral", "medium", (25, 100)),
    "best_friend": ("close", "casual", "high", (30, 150)),
    "friend": ("casual", "casual", "medium", (20, 100)),
    "colleague": ("distant", "neutral", "low", (15, 50)),
    "boss": ("distant", "formal", "low", (25, 75)),
    "client": ("distant", "formal", "low", (40, 120)),
    "teacher": ("distant", "formal", "medium", (15, 50)),
    "neighbor": ("distant", "neutral", "low", (10, 40)),
    "acquaintance": ("casual", "neutral", "medium", (25, 75)),
}

DEFAULT_RELATIONSHIP = "acquaintance"

# normalized label -> canonical label
RELATIONSHIP_ALIASES = {
    "wife": "spouse",
    "husband": "spouse",
    "spouse": "spouse",
    "partner": "romantic_partner",
    "romantic partner": "romantic_partner",
    "girlfriend": "romantic_partner",
    "boyfriend": "romantic_partner",
    "fiance": "romantic_partner",
    "fiancee": "romantic_partner",
    "significant other": "romantic_partner",
    "mother": "parent",
    "mom": "parent",
    "mum": "parent",
    "father": "parent",
    "dad": "parent",
    "parent": "parent",
    "stepmother": "parent",
    "stepfather": "parent",
    "son": "child",
    "daughter": "child",
    "child": "child",
    "children": "child",
    "kid": "child",
    "sister": "sibling",
    "brother": "sibling",
    "sibling": "sibling",
    "sis": "sibling",
    "bro": "sibling",
    "twin": "sibling",
    "grandmother": "grandparent",
    "grandma": "grandparent",
    "grandfather": "grandparent",
    "grandpa": "grandparent",
    "grandparent": "grandparent",
    "nana": "grandparent",
    "grandson": "grandchild",
    "granddaughter": "grandchild",
    "grandchild": "grandchild",
    "grandchildren": "grandchild",
    "aunt": "extended_family",
    "uncle": "extended_family",
    "cousin": "extended_family",
    "niece": "extended_family",
    "nephew": "extended_family",
    "mother in law": "extended_family",
    "father in law": "extended_family",
    "sister in law": "extended_family",
    "brother in law": "extended_family",
    "best friend": "best_friend",
    "bff": "best_friend",
    "close friend": "best_friend",
    "friend": "friend",
    "roommate": "friend",
    "classmate": "friend",
    "colleague": "colleague",
    "coworker": "colleague",
    "co worker": "colleague",
    "teammate": "colleague",
    "boss": "boss",
    "manager": "boss",
    "supervisor": "boss",
    "mentor": "boss",
    "client": "client",
    "customer": "client",
    "teacher": "teacher",
    "professor": "teacher",
    "tutor": "teacher",
    "coach": "teacher",
    "neighbor": "neighbor",
    "neighbour": "neighbor",
    "acquaintance": "acquaintance",
}

# Legacy closeness vocabulary accepted as an override
CLOSENESS_ALIASES = {
    "low": "distant",
    "medium": "casual",
    "high": "close",
    "very_high": "very_close",
}

# note keyword (single word or two-word phrase) -> interest tag
INTEREST_KEYWORDS = {
    "yoga": "wellness",
    "meditation": "wellness",
    "mindfulness": "wellness",
    "pilates": "wellness",
    "spa": "wellness",
    "massage": "wellness",
    "self care": "wellness",
    "coffee": "food_beverage",
    "tea": "food_beverage",
    "wine": "food_beverage",
    "cooking": "food_beverage",
    "baking": "food_beverage",
    "chocolate": "food_beverage",
    "foodie": "food_beverage",
    "cocktails": "food_beverage",
    "beer": "food_beverage",
    "whiskey": "food_beverage",
    "bbq": "food_beverage",
    "running": "fitness",
    "gym": "fitness",
    "workout": "fitness",
    "cycling": "fitness",
    "marathon": "fitness",
    "crossfit": "fitness",
    "hiking": "outdoors",
    "camping": "outdoors",
    "fishing": "outdoors",
    "climbing": "outdoors",
    "kayaking": "outdoors",
    "nature": "outdoors",
    "reading": "books",
    "books": "books",
    "novels": "books",
    "poetry": "books",
    "bookworm": "books",
    "music": "music",
    "guitar": "music",
    "piano": "music",
    "vinyl": "music",
    "concerts": "music",
    "singing": "music",
    "jazz": "music",
    "gadgets": "tech",
    "technology": "tech",
    "tech": "tech",
    "coding": "tech",
    "programming": "tech",
    "computers": "tech",
    "smart home": "tech",
    "gaming": "gaming",
    "video games": "gaming",
    "board games": "gaming",
    "puzzles": "gaming",
    "chess": "gaming",
    "painting": "art",
    "drawing": "art",
    "sketching": "art",
    "pottery": "art",
    "crafts": "art",
    "knitting": "art",
    "travel": "travel",
    "traveling": "travel",
    "adventure": "travel",
    "photography": "photography",
    "camera": "photography",
    "gardening": "gardening",
    "plants": "gardening",
    "succulents": "gardening",
    "flowers": "gardening",
    "fashion": "fashion",
    "style": "fashion",
    "sneakers": "fashion",
    "jewelry": "fashion",
    "makeup": "beauty",
    "skincare": "beauty",
    "perfume": "beauty",
    "decor": "home",
    "candles": "home",
    "cozy": "home",
    "dog": "pets",
    "dogs": "pets",
    "cat": "pets",
    "cats": "pets",
    "pets": "pets",
    "football": "sports",
    "soccer": "sports",
    "basketball": "sports",
    "tennis": "sports",
    "golf": "sports",
    "baseball": "sports",
    "movies": "movies",
    "film": "movies",
    "cinema": "movies",
}

KIDS_TAG = "kids"
SENIOR_TAG = "senior"

# (exclusive upper age, age-group tag); older recipients are SENIOR_TAG
AGE_GROUPS = (
    (13, KIDS_TAG),
    (18, "teen"),
    (35, "young_adult"),
    (55, "adult"),
)

# normalized gender -> gender-affinity tag; unlisted values add no tag
GENDER_ALIASES = {
    "female": "female",
    "f": "female",
    "woman": "female",
    "girl": "female",
    "she": "female",
    "her": "female",
    "male": "male",
    "m": "male",
    "man": "male",
    "boy": "male",
    "he": "male",
    "him": "male",
    "nonbinary": "nonbinary",
    "non_binary": "nonbinary",
    "enby": "nonbinary",
}

# Tags derived from age and gender rather than interests
DEMOGRAPHIC_TAGS = frozenset(
    {tag for _, tag in AGE_GROUPS} | {SENIOR_TAG} | set(GENDER_ALIASES.values())
)

# normalized occasion -> preferred product categories
OCCASION_PREFERENCES = {
    "birthday": ("experiences", "tech", "books", "games", "fashion", "wellness", "food_beverage", "home"),
    "anniversary": ("jewelry", "experiences", "home", "wellness", "art", "luxury"),
    "wedding": ("home", "kitchen", "experiences", "art"),
    "christmas": ("home", "food_beverage", "toys", "games", "books", "fashion"),
    "valentines_day": ("jewelry", "beauty", "flowers", "food_beverage", "experiences"),
    "mothers_day": ("wellness", "jewelry", "home", "flowers", "beauty"),
    "fathers_day": ("tools", "tech", "food_beverage", "outdoors", "sports"),
    "graduation": ("tech", "books", "stationery", "office", "travel"),
    "housewarming": ("home", "kitchen", "plants", "food_beverage"),
    "thank_you": ("food_beverage", "stationery", "flowers", "wellness"),
    "retirement": ("travel", "experiences", "gardening", "books"),
    "baby_shower": ("baby", "toys"),
    "get_well": ("wellness", "books", "flowers", "food_beverage"),
}

OCCASION_ALIASES = {
    "xmas": "christmas",
    "holiday": "christmas",
    "holidays": "christmas",
    "valentine": "valentines_day",
    "valentines": "valentines_day",
    "valentine's_day": "valentines_day",
    "mother's_day": "mothers_day",
    "father's_day": "fathers_day",
    "thanks": "thank_you",
    "thankyou": "thank_you",
    "get_well_soon": "get_well",
}

# Categories excluded for formal relationships
NOVELTY_CATEGORIES = frozenset({"novelty", "gag_gift", "gag_gifts", "joke", "humor"})

# Categories excluded for casual relationships above the luxury price ceiling
LUXURY_CATEGORIES = frozenset({"luxury", "designer", "fine_jewelry", "watches"})

_FORMAL_SAFE = frozenset({
    "books", "stationery", "office", "home", "kitchen", "food_beverage",
    "wellness", "art", "experiences", "flowers", "plants",
})
_NEUTRAL_SAFE = _FORMAL_SAFE | frozenset({
    "tech", "accessories", "fashion", "beauty", "music", "games", "gaming",
    "outdoors", "fitness", "sports", "travel", "photography", "gardening",
    "pets", "movies", "jewelry",
})
_CASUAL_SAFE = _NEUTRAL_SAFE | frozenset({
    "novelty", "gag_gift", "toys", "luxury", "designer", "watches", "baby",
})

# formality -> allow-listed categories
FORMALITY_ALLOWED_CATEGORIES = {
    "formal": _FORMAL_SAFE,
    "neutral": _NEUTRAL_SAFE,
    "casual": _CASUAL_SAFE,
}
