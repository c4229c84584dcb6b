"""Canonical names for trainers, classes and studio locations.

Schedule sheets and attendance exports are typed by hand, so the same
trainer shows up as "Karan", "karan b" or "KARAN BHATIA". Lookups go through
ordered (pattern, canonical) tables: an exact match wins, otherwise the
first pattern (in table order) found inside the text wins. Table order is
part of the behaviour: "karan" precedes "karanvir", so "Karanvir B" resolves
to Karan Bhatia on the substring pass.
"""

from dataclasses import dataclass

from src.schedule_analyzer.models import Difficulty

AliasTable = tuple[tuple[str, str], ...]
LocationRules = tuple[tuple[tuple[str, ...], str], ...]

TRAINER_ALIASES: AliasTable = (
    # Mumbai
    ("anisha", "Anisha Shah"),
    ("atulan", "Atulan Purohit"),
    ("cauveri", "Cauveri Vikrant"),
    ("karan", "Karan Bhatia"),
    ("karanvir", "Karanvir Bhatia"),
    ("mriga", "Mrigakshi Jaiswal"),
    ("nishanth", "Nishanth Raj"),
    ("nishant", "Nishanth Raj"),
    ("pranjali", "Pranjali Jain"),
    ("reshma", "Reshma Sharma"),
    ("richard", "Richard D'Costa"),
    ("rohan", "Rohan Dahima"),
    # Bengaluru & common
    ("kajol", "Kajol Kanchan"),
    ("kanchan", "Kajol Kanchan"),
    ("pushyank", "Pushyank Nahar"),
    ("nahar", "Pushyank Nahar"),
    ("shruti k", "Shruti Kulkarni"),
    ("shruti kulkarni", "Shruti Kulkarni"),
    ("kulkarni", "Shruti Kulkarni"),
    ("vivaran", "Vivaran Dhasmana"),
    ("dhasmana", "Vivaran Dhasmana"),
    ("saniya", "Saniya Jaiswal"),
    ("jaiswal", "Saniya Jaiswal"),
    ("shruti s", "Shruti Suresh"),
    ("shruti suresh", "Shruti Suresh"),
    ("suresh", "Shruti Suresh"),
    ("poojitha", "Poojitha Bhaskar"),
    ("bhaskar", "Poojitha Bhaskar"),
    ("siddhartha", "Siddhartha Kusuma"),
    ("kusuma", "Siddhartha Kusuma"),
    ("veena", "Veena Narasimhan"),
    ("narasimhan", "Veena Narasimhan"),
    ("chaitanya", "Chaitanya"),
)

CLASS_ALIASES: AliasTable = (
    ("amped up", "Studio Amped Up!"),
    ("bbb", "Studio Back Body Blaze"),
    ("bbb exp", "Studio Back Body Blaze Express"),
    ("barre57", "Studio Barre 57"),
    ("barre 57", "Studio Barre 57"),
    ("barre57 exp", "Studio Barre 57 Express"),
    ("barre 57 exp", "Studio Barre 57 Express"),
    ("cardio b", "Studio Cardio Barre"),
    ("cardio barre", "Studio Cardio Barre"),
    ("cardio b exp", "Studio Cardio Barre Express"),
    ("cardio barre exp", "Studio Cardio Barre Express"),
    ("cardio b+", "Studio Cardio Barre Plus"),
    ("cardio barre+", "Studio Cardio Barre Plus"),
    ("studio fit", "Studio FIT"),
    ("fit", "Studio FIT"),
    ("studio foundations", "Studio Foundations"),
    ("foundations", "Studio Foundations"),
    ("studio hiit", "Studio HIIT"),
    ("hiit", "Studio HIIT"),
    ("hosted", "Studio Hosted Class"),
    ("studio mat 57", "Studio Mat 57"),
    ("mat57", "Studio Mat 57"),
    ("mat 57", "Studio Mat 57"),
    ("mat57 exp", "Studio Mat 57 Express"),
    ("mat 57 exp", "Studio Mat 57 Express"),
    ("cycle", "Studio powerCycle"),
    ("cycle exp", "Studio powerCycle Express"),
    ("prenatal", "Studio Pre/Post Natal"),
    ("studio recovery", "Studio Recovery"),
    ("recovery", "Studio Recovery"),
    ("sweat", "Studio SWEAT In 30"),
    ("studio trainer's choice", "Studio Trainer's Choice"),
    ("trainer's choice", "Studio Trainer's Choice"),
)

# Checked top to bottom; a rule matches if any fragment is in the text
LOCATION_RULES: LocationRules = (
    # Mumbai
    (("kemps", "kwality"), "Kwality House, Kemps Corner"),
    (("bandra", "supreme"), "Supreme HQ, Bandra"),
    # Bengaluru
    (("c+c", "cumberland"), "C+C"),
    (("vm road", "vm", "kenkere"), "Kenkere House"),
    (("koramangala",), "Koramangala"),
    (("whitefield",), "Whitefield"),
    (("indiranagar",), "Indiranagar"),
    # Online / virtual
    (("online", "virtual", "zoom"), "Online"),
)

DIFFICULTY_BY_CLASS: dict[str, Difficulty] = {
    "Studio Barre 57": "beginner",
    "Studio Barre 57 Express": "beginner",
    "Studio Foundations": "beginner",
    "Studio SWEAT In 30": "beginner",
    "Studio Recovery": "beginner",
    "Studio HIIT": "advanced",
    "Studio Amped Up!": "advanced",
    "Studio Back Body Blaze": "intermediate",
    "Studio Back Body Blaze Express": "intermediate",
    "Studio Cardio Barre": "intermediate",
    "Studio Cardio Barre Express": "intermediate",
    "Studio Cardio Barre Plus": "intermediate",
    "Studio FIT": "intermediate",
    "Studio Mat 57": "intermediate",
    "Studio Mat 57 Express": "intermediate",
    "Studio powerCycle": "beginner",
    "Studio powerCycle Express": "beginner",
    "Studio Pre/Post Natal": "beginner",
    "Studio Trainer's Choice": "advanced",
    "Studio Hosted Class": "beginner",
}

DEFAULT_DIFFICULTY: Difficulty = "intermediate"
CANCELED_MARKER = "class canceled"


def _lookup(table: AliasTable, value: str) -> str | None:
    """Exact match first, then the first pattern contained in the value."""
    for pattern, canonical in table:
        if value == pattern:
            return canonical
    for pattern, canonical in table:
        if pattern in value:
            return canonical
    return None


@dataclass(frozen=True)
class Normalizer:
    """Maps free-text trainer, class and location names to canonical forms.

    Tables are passed in at construction so alternative studios (or tests)
    can supply their own; the module-level functions use DEFAULT_NORMALIZER.
    """

    trainer_aliases: AliasTable = TRAINER_ALIASES
    class_aliases: AliasTable = CLASS_ALIASES
    location_rules: LocationRules = LOCATION_RULES
    difficulties: tuple[tuple[str, Difficulty], ...] = tuple(DIFFICULTY_BY_CLASS.items())

    def trainer_name(self, raw: str | None) -> str:
        if not raw:
            return ""
        value = raw.strip().lower()
        # Canonical names map to themselves before any alias is tried
        for _, canonical in self.trainer_aliases:
            if value == canonical.lower():
                return canonical
        canonical = _lookup(self.trainer_aliases, value)
        return canonical if canonical is not None else raw.strip()

    def class_name(self, raw: str | None, trainer_hint: str | None = None) -> str:
        """Canonical class name.

        Unknown names are treated as private sessions and labelled after the
        trainer hint (or the raw text): "Private Class - (Karan)". A bare
        "Class canceled" is passed through so callers can drop it.
        """
        if not raw:
            return ""
        canonical = _lookup(self.class_aliases, raw.strip().lower())
        if canonical is not None:
            return canonical

        client_name = (trainer_hint or raw).strip()
        if client_name and client_name.lower() != CANCELED_MARKER:
            return f"Private Class - ({client_name})"
        return raw.strip()

    def location(self, raw: str | None) -> str:
        if not raw:
            return ""
        value = raw.strip().lower()
        for fragments, canonical in self.location_rules:
            if any(fragment in value for fragment in fragments):
                return canonical
        return raw.strip()

    def difficulty(self, class_name: str) -> Difficulty:
        for name, level in self.difficulties:
            if name == class_name:
                return level
        return DEFAULT_DIFFICULTY


DEFAULT_NORMALIZER = Normalizer()


def normalize_trainer_name(raw: str | None) -> str:
    return DEFAULT_NORMALIZER.trainer_name(raw)


def normalize_class_name(raw: str | None, trainer_hint: str | None = None) -> str:
    return DEFAULT_NORMALIZER.class_name(raw, trainer_hint)


def normalize_location(raw: str | None) -> str:
    return DEFAULT_NORMALIZER.location(raw)


def difficulty_for(class_name: str) -> Difficulty:
    """Difficulty level for a canonical class name, "intermediate" if unknown."""
    return DEFAULT_NORMALIZER.difficulty(class_name)
