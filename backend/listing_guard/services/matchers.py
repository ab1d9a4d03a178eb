# backend/listing_guard/services/matchers.py
"""
Text scanners shared by every listing check.

Vocabularies are immutable module constants; each matcher takes its vocabulary
as a parameter so tests can pass a custom one.
"""
import re
from functools import lru_cache
from typing import Iterable, List, Tuple

RESTRICTED_WORDS: Tuple[str, ...] = (
    # health / medical claims
    "anti-microbial", "Airborne microbial", "anti-bacterial", "bacterial", "pesticides",
    "anti-fungal", "fungal", "kill", "antimicrobial", "virus", "antifungal", "antibacterial",
    "heal", "sexy", "insect", "insecticide", "pesticide", "pest", "safe", "non-poisonous",
    "non-injurious", "harmless", "infection", "risk", "disease", "non-toxic", "natural",
    "repellent", "repelling", "repel", "antiseptic", "germ", "cbd", "compliance", "heart",
    "covid", "coronavirus", "arthritis", "diabetes", "Ethanol", "toxic", "non", "weed",
    "mold", "resistant", "kn", "fda approved", "bacteria", "biodegradable", "biological",
    "contaminants", "cancer", "certified", "compostable", "cure", "decomposable", "degradable",
    "filter", "flawless", "fungus", "acupuncture", "green", "guarantee", "home", "marine",
    "mildew", "mould", "spores", "native", "N95", "KN95", "american indian tribes",
    "fibrosis", "cystic fibrosis", "non-toxi", "noncorrosive", "peal", "platinum", "proven",
    "recommended", "sanitize", "sanitizes", "tested", "treat", "validated", "viruses",
    "fungicides", "fungicide", "detoxify", "detoxification", "weight loss", "treatment",
    "toxin", "toxins", "viral", "parasitic", "remedy", "remedies", "diseases", "cancroid",
    "chlamydia", "cytomegalovirus", "cmv", "human papiloma", "hpv", "gororrhea", "clap",
    "hepatitis", "herpes simplex", "hsv", "immunodeficiency", "hiv", "aids",
    "acquired immune deficiency syndrome", "lymphogranuloma venereum", "lgv",
    "mononucleosis", "mono", "mycoplasma genitalium", "nongonococcal urethritis", "ngu",
    "pelvic inflammatory", "pid", "public lice", "crabs", "scabies", "trichomoniasis",
    "trich", "liver", "multiple sclerosis", "kidney", "alzheimer's", "dementia", "stroke",
    "parkinson's", "parkinson", "diabetic neuropathy", "flu", "influenza", "meningitis",
    "glaucoma", "cataract", "attention deficit disorder", "drug", "add", "adhd",
    "concussion", "traumatic brain injuries", "tbis", "nano silver", "tumor",
    "seasonal affective", "sad", "depression", "crystic fibrosis", "hodgkin's lymphoma",
    "lupus", "muscular dystrophy", "als", "infrared", "mental", "anxiety", "stress", "pearl",
    # controlled substances
    "Amanita muscaria", "Clenbuterol", "Coca Leaves", "Codeine", "Damiana",
    "Dimethyltryptamine (DMT)", "Drotebanol", "Ephedrine", "Ergotamine",
    "Hawaiian Baby Woodrose or Argyreia Nervosa seeds", "Jimson Weed", "Kanna", "Ketamine",
    "Klip Dagga", "Kratom", "Marshmallow Leaf", "Panther amanitas", "Peyote or mescaline",
    "Phenylpropanalomine", "Poppers amyl nitrite", "Poppy", "Pseudoephedrine",
    "Psilocybe Cubensis", "Psilocybin", "Salvia Divinorum", "Sonoran Song", "Mimosa Hostilis",
    "Syrian Rue", "Wild Dagga", "Yopo Seeds",
    # more conditions
    "Gonorrhea", "Syphilis", "Pubic", "Alzheimer’s", "Alzheimer", "Concussion", "Gout",
    "Crohn’s", "Celiac", "Epilepsy", "Seizures", "Seizure", "Obesity", "Autism",
    "macula", "macular",
)

SPECIAL_CHARACTERS: str = "!$?_{}^¬¦~#<>*"

# shown to people (prompt, docs) in this order
SPECIAL_CHARACTERS_DISPLAY: str = " ".join(SPECIAL_CHARACTERS)


@lru_cache(maxsize=1024)
def _word_pattern(word: str) -> "re.Pattern[str]":
    # whole word: no word character directly before or after the term
    return re.compile(r"(?<!\w)" + re.escape(word) + r"(?!\w)", re.IGNORECASE)


@lru_cache(maxsize=32)
def _charset_pattern(characters: str) -> "re.Pattern[str]":
    return re.compile("[" + re.escape(characters) + "]")


_TOKEN = re.compile(r"\b\w+\b")


def find_restricted_words(text: str, vocabulary: Iterable[str] = RESTRICTED_WORDS) -> List[str]:
    """Return every vocabulary term found in ``text``, verbatim and in vocabulary order."""
    return [word for word in vocabulary if _word_pattern(word).search(text)]


def find_special_characters(text: str, characters: str = SPECIAL_CHARACTERS) -> List[str]:
    """Return the unique prohibited characters in ``text`` in order of first appearance."""
    seen: List[str] = []
    for ch in _charset_pattern(characters).findall(text):
        if ch not in seen:
            seen.append(ch)
    return seen


def has_duplicate_words(text: str) -> bool:
    seen = set()
    for token in _TOKEN.findall(text.lower()):
        if token in seen:
            return True
        seen.add(token)
    return False
