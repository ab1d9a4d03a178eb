# backend/listing_guard/services/compliance.py
"""
Listing compliance checks for Amazon title, bullet points, description and
backend keywords.

Every check is a pure function: no I/O, no shared state, and the same input
always yields an identical result. The standalone listing analysis and the
assistant's suggestion validation both call these functions.

Counting policy differs per field:
- title / backend keywords: one error per failing rule
- bullet points: severity bucket, the number of rule categories with at least
  one violating bullet (0-3)
- description: errors accumulate over every paragraph and rule, while each
  rule's reported result is the one from the last paragraph checked
"""
from typing import Any, Dict, List, Optional, Sequence

from listing_guard.schemas.listing import CheckResult, FieldAnalysis, ListingAnalysis
from listing_guard.services.matchers import (
    RESTRICTED_WORDS,
    SPECIAL_CHARACTERS,
    find_restricted_words,
    find_special_characters,
    has_duplicate_words,
)

TITLE_MIN_CHARS = 80
TITLE_MAX_CHARS = 200
BULLET_MIN_CHARS = 150
DESCRIPTION_MIN_CHARS = 1700
BACKEND_KEYWORDS_MIN_CHARS = 450
BACKEND_KEYWORDS_MAX_CHARS = 500


def _ok(message: str, point: Optional[int] = None) -> CheckResult:
    return CheckResult(status="Success", message=message, howToSolve="", pointNumber=point)


def _error(message: str, how_to_solve: str, point: Optional[int] = None) -> CheckResult:
    return CheckResult(status="Error", message=message, howToSolve=how_to_solve, pointNumber=point)


def _unique(items: List[str]) -> List[str]:
    out: List[str] = []
    for item in items:
        if item not in out:
            out.append(item)
    return out


# -------------------- Title --------------------

def check_title(
    title: str,
    vocabulary: Sequence[str] = RESTRICTED_WORDS,
    characters: str = SPECIAL_CHARACTERS,
) -> FieldAnalysis:
    results: Dict[str, Any] = {}
    errors = 0

    if len(title) < TITLE_MIN_CHARS:
        errors += 1
        results["charLim"] = _error(
            f"The product title is under {TITLE_MIN_CHARS} characters, which can limit its visibility "
            "and effectiveness in search results, potentially reducing click-through rates.",
            f"Extend the product title to between {TITLE_MIN_CHARS} to {TITLE_MAX_CHARS} characters. "
            "Include attributes such as brand, size, color, and unique features. Use keyword research "
            "tools to make sure the title is optimized.",
        )
    else:
        results["charLim"] = _ok(
            "Great job! Your product title is well-optimized for visibility and readability, "
            "enhancing its appeal to potential buyers."
        )

    words = find_restricted_words(title, vocabulary)
    if words:
        errors += 1
        results["restrictedWords"] = _error(
            "Your product title contains restricted or banned words according to Amazon's guidelines. "
            "Using such words can lead to your product listing being suppressed or removed. "
            f"The words used are: {', '.join(words)}",
            "Review your product title and remove restricted words. Refer to the latest Amazon seller "
            "policies to ensure compliance.",
        )
    else:
        results["restrictedWords"] = _ok(
            "Excellent! Your product title complies with Amazon's guidelines, avoiding any restricted words."
        )

    chars = find_special_characters(title, characters)
    if chars:
        errors += 1
        results["specialCharacters"] = _error(
            "Your product title includes special characters that violate Amazon's guidelines. Using "
            "prohibited characters can lead to listing suppression or reduced search visibility. "
            f"The characters used are: {', '.join(chars)}",
            "Remove all prohibited special characters from the product title. Follow Amazon's title "
            "guidelines to maintain visibility and prevent suppression.",
        )
    else:
        results["specialCharacters"] = _ok(
            "Well done! Your product title adheres to Amazon's guidelines by avoiding prohibited "
            "special characters."
        )

    return FieldAnalysis(numberOfErrors=errors, **results)


# -------------------- Bullet points --------------------

def _severity_bucket(*category_failed: bool) -> int:
    return sum(1 for failed in category_failed if failed)


def check_bullet_points(
    bullets: Sequence[str],
    vocabulary: Sequence[str] = RESTRICTED_WORDS,
    characters: str = SPECIAL_CHARACTERS,
) -> FieldAnalysis:
    short_bullets = 0
    restricted_bullets = 0
    special_bullets = 0
    first_words: List[str] = []
    first_chars: List[str] = []

    for bullet in bullets:
        if len(bullet) < BULLET_MIN_CHARS:
            short_bullets += 1

        words = find_restricted_words(bullet, vocabulary)
        if words:
            restricted_bullets += 1
            first_words.append(words[0])

        chars = find_special_characters(bullet, characters)
        if chars:
            special_bullets += 1
            first_chars.append(chars[0])

    results: Dict[str, Any] = {}

    if short_bullets:
        results["charLim"] = _error(
            f"Your bullet points are under {BULLET_MIN_CHARS} characters. Short bullet points may not "
            "provide enough detail to effectively communicate the features and benefits of your "
            "products, potentially affecting customer interest and conversion rates.",
            f"Enhance your bullet points to be at least {BULLET_MIN_CHARS} characters long, focusing on "
            "key features, benefits, and differentiators of your product. Use this space to clearly "
            "articulate why customers should choose your product.",
        )
    else:
        results["charLim"] = _ok(
            "Great job! Your bullet points are adequately detailed, providing valuable information to "
            "customers and effectively enhancing your product's appeal."
        )

    if restricted_bullets:
        results["restrictedWords"] = _error(
            "Your bullet points contain words that are restricted or banned by Amazon's guidelines. "
            "Using such words can lead to your product being blocked or your listing being suppressed. "
            f"The words used are: {', '.join(_unique(first_words))}",
            "Review the bullet points and remove all restricted or banned words. Consult the current "
            "Amazon selling policies and style guides so your listing complies with all content rules.",
        )
    else:
        results["restrictedWords"] = _ok(
            "Excellent! Your bullet points are in full compliance with Amazon's guidelines, free of any "
            "restricted or banned words."
        )

    if special_bullets:
        results["specialCharacters"] = _error(
            "Your bullet points contain special characters that are restricted by Amazon's guidelines. "
            "Using these characters can lead to issues with listing compliance and may prevent your "
            f"listing from being properly displayed. The special characters used are: "
            f"{', '.join(_unique(first_chars))}",
            "Review your bullet points and remove all restricted special characters. Refer to Amazon's "
            "official style guide so your content follows their formatting requirements.",
        )
    else:
        results["specialCharacters"] = _ok(
            "Well done! Your bullet points comply with Amazon's guidelines, avoiding any restricted "
            "special characters."
        )

    errors = _severity_bucket(short_bullets > 0, restricted_bullets > 0, special_bullets > 0)
    return FieldAnalysis(numberOfErrors=errors, **results)


# -------------------- Description --------------------

def check_description(
    paragraphs: Sequence[str],
    vocabulary: Sequence[str] = RESTRICTED_WORDS,
    characters: str = SPECIAL_CHARACTERS,
) -> FieldAnalysis:
    results: Dict[str, Any] = {}
    errors = 0

    for point, text in enumerate(paragraphs, start=1):
        if len(text) < DESCRIPTION_MIN_CHARS:
            errors += 1
            results["charLim"] = _error(
                f"Your product description is under {DESCRIPTION_MIN_CHARS} characters. This may not "
                "provide enough information to fully educate potential buyers.",
                f"Expand your product description to at least {DESCRIPTION_MIN_CHARS} characters. Include "
                "benefits, use cases, and unique features, using proper formatting and keywords.",
                point,
            )
        else:
            results["charLim"] = _ok("Great job! Your product description is sufficiently detailed.", point)

        words = find_restricted_words(text, vocabulary)
        if words:
            errors += 1
            results["restrictedWords"] = _error(
                "Your product description contains restricted or banned words according to Amazon's "
                f"guidelines. The words used are: {', '.join(words)}",
                "Review and remove restricted words from the description. Ensure full compliance with "
                "Amazon's guidelines.",
                point,
            )
        else:
            results["restrictedWords"] = _ok(
                "Excellent! Your product description avoids all restricted words.", point
            )

        chars = find_special_characters(text, characters)
        if chars:
            errors += 1
            results["specialCharacters"] = _error(
                "Your product description includes restricted special characters. "
                f"The special characters used are: {', '.join(chars)}",
                "Remove all restricted characters from your product description to meet Amazon's "
                "formatting guidelines.",
                point,
            )
        else:
            results["specialCharacters"] = _ok(
                "Your product description is clean and free of restricted characters.", point
            )

    return FieldAnalysis(numberOfErrors=errors, **results)


# -------------------- Backend keywords --------------------

def check_backend_keywords(keywords: Optional[str]) -> FieldAnalysis:
    if not keywords or not isinstance(keywords, str):
        return FieldAnalysis(
            charLim=_error(
                "Backend keywords are missing or invalid.",
                "Please ensure backend keywords are properly set for this product.",
            ),
            numberOfErrors=1,
        )

    results: Dict[str, Any] = {}
    errors = 0

    if len(keywords) < BACKEND_KEYWORDS_MIN_CHARS:
        errors += 1
        results["charLim"] = _error(
            f"Your backend keywords total less than {BACKEND_KEYWORDS_MIN_CHARS} characters. This may "
            "limit your product's visibility by missing relevant search terms.",
            f"Use at least {BACKEND_KEYWORDS_MIN_CHARS} characters out of the available "
            f"{BACKEND_KEYWORDS_MAX_CHARS}. Include relevant, diverse, and unique keywords to improve "
            "product discoverability.",
        )
    else:
        results["charLim"] = _ok("Great job! You're utilizing the backend keyword space effectively.")

    if has_duplicate_words(keywords):
        errors += 1
        results["duplicateWords"] = _error(
            "Your backend keywords contain duplicate words, wasting space and reducing effectiveness.",
            "Remove duplicate words. Use synonyms, alternate terms, and other relevant keywords to "
            "increase reach.",
        )
    else:
        results["duplicateWords"] = _ok("Excellent! Your backend keywords are unique and fully optimized.")

    return FieldAnalysis(numberOfErrors=errors, **results)


# -------------------- Whole listing --------------------

def analyze_listing(
    title: str,
    bullet_points: Sequence[str],
    description: Sequence[str],
    backend_keywords: Optional[str] = None,
    include_backend_keywords: bool = False,
) -> ListingAnalysis:
    """
    Run the pre-submission check over a full listing.

    Backend keywords are only checked when ``include_backend_keywords`` is set,
    in which case a missing value counts as one error.
    """
    title_result = check_title(title)
    bullets_result = check_bullet_points(bullet_points)
    description_result = check_description(description)
    backend_result = check_backend_keywords(backend_keywords) if include_backend_keywords else None

    total = title_result.numberOfErrors + bullets_result.numberOfErrors + description_result.numberOfErrors
    if backend_result is not None:
        total += backend_result.numberOfErrors

    return ListingAnalysis(
        title=title_result,
        bulletPoints=bullets_result,
        description=description_result,
        backendKeywords=backend_result,
        totalErrors=total,
    )
