"""Domain enumerations."""

from enum import StrEnum


class JobStatus(StrEnum):
    """Status of a content job as it moves through the pipeline."""

    PENDING = "PENDING"
    CRAWLED = "CRAWLED"
    TRANSCRIBED = "TRANSCRIBED"
    ANALYZED = "ANALYZED"
    EDITED = "EDITED"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    PUBLISHED = "PUBLISHED"
    REJECTED = "REJECTED"
    NEEDS_EDIT = "NEEDS_EDIT"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.PUBLISHED, JobStatus.REJECTED, JobStatus.FAILED)


class JobEvent(StrEnum):
    """Events that move a job between statuses."""

    DOWNLOADED = "DOWNLOADED"
    TRANSCRIBED = "TRANSCRIBED"
    ANALYZED = "ANALYZED"
    EDITED = "EDITED"
    QUEUED_FOR_REVIEW = "QUEUED_FOR_REVIEW"
    AUTO_REJECTED = "AUTO_REJECTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    EDIT_REQUESTED = "EDIT_REQUESTED"
    PUBLISHED = "PUBLISHED"
    FAILED = "FAILED"


class Recommendation(StrEnum):
    """Advisory outcome of pre-download candidate evaluation."""

    HIGHLY_RECOMMENDED = "HIGHLY_RECOMMENDED"
    RECOMMENDED = "RECOMMENDED"
    MAYBE = "MAYBE"
    SKIP = "SKIP"

    @property
    def rank(self) -> int:
        """Lower is better."""
        return _RECOMMENDATION_RANK[self]

    @classmethod
    def parse(cls, value: object) -> "Recommendation":
        if not isinstance(value, str):
            return cls.MAYBE
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.MAYBE


_RECOMMENDATION_RANK = {
    Recommendation.HIGHLY_RECOMMENDED: 0,
    Recommendation.RECOMMENDED: 1,
    Recommendation.MAYBE: 2,
    Recommendation.SKIP: 3,
}


class ReviewPriority(StrEnum):
    """Ordering hint for the human review queue."""

    HIGH = "HIGH"
    NORMAL = "NORMAL"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        """Lower is reviewed first."""
        return {"HIGH": 0, "NORMAL": 1, "LOW": 2}[self.value]


class PendingContentStatus(StrEnum):
    """Status of a review queue entry."""

    PENDING_REVIEW = "PENDING_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    NEEDS_EDIT = "NEEDS_EDIT"
    PUBLISHED = "PUBLISHED"


class Category(StrEnum):
    """Catalog categories."""

    LANGUAGE = "LANGUAGE"
    SCIENCE = "SCIENCE"
    HISTORY = "HISTORY"
    MATHEMATICS = "MATHEMATICS"
    ART = "ART"
    STARTUP = "STARTUP"
    MARKETING = "MARKETING"
    PROGRAMMING = "PROGRAMMING"
    DESIGN = "DESIGN"
    PRODUCTIVITY = "PRODUCTIVITY"
    PSYCHOLOGY = "PSYCHOLOGY"
    FINANCE = "FINANCE"
    HEALTH = "HEALTH"
    PARENTING = "PARENTING"
    COOKING = "COOKING"
    TRAVEL = "TRAVEL"
    HOBBY = "HOBBY"
    TREND = "TREND"
    OTHER = "OTHER"
    FUN = "FUN"

    @classmethod
    def from_string(cls, value: object) -> "Category":
        """Lenient parse; unknown or non-string values map to OTHER."""
        if not value or not isinstance(value, str):
            return cls.OTHER
        normalized = value.strip().upper()
        if normalized == "MATH":
            return cls.MATHEMATICS
        try:
            return cls(normalized)
        except ValueError:
            return cls.OTHER

    @property
    def is_educational(self) -> bool:
        return self in EDUCATIONAL_CATEGORIES


EDUCATIONAL_CATEGORIES = frozenset(
    {
        Category.PROGRAMMING,
        Category.SCIENCE,
        Category.MATHEMATICS,
        Category.LANGUAGE,
        Category.HISTORY,
    }
)

# Hard skills vs soft skills, used to balance query generation
HARD_SKILL_CATEGORIES = frozenset(
    {
        Category.PROGRAMMING,
        Category.SCIENCE,
        Category.MATHEMATICS,
        Category.LANGUAGE,
        Category.DESIGN,
        Category.FINANCE,
    }
)


class Difficulty(StrEnum):
    """Content difficulty level."""

    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"

    @classmethod
    def from_string(cls, value: object) -> "Difficulty":
        if not isinstance(value, str):
            return cls.BEGINNER
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.BEGINNER


class ContentLanguage(StrEnum):
    """Languages content is searched for, transcribed in, and described in."""

    KO = "ko"
    EN = "en"
    JA = "ja"

    @property
    def display_name(self) -> str:
        return {"ko": "Korean", "en": "English", "ja": "Japanese"}[self.value]

    @property
    def native_name(self) -> str:
        return {"ko": "한국어", "en": "English", "ja": "日本語"}[self.value]

    @property
    def locale(self) -> str:
        """Locale code used by speech-to-text providers."""
        return {"ko": "ko-KR", "en": "en-US", "ja": "ja-JP"}[self.value]

    @classmethod
    def from_code(cls, code: object) -> "ContentLanguage":
        """Lenient parse; unknown or non-string codes map to Korean."""
        if not isinstance(code, str):
            return cls.KO
        try:
            return cls(code.strip().lower()[:2])
        except ValueError:
            return cls.KO


class RejectionReason(StrEnum):
    """Reviewer rejection taxonomy."""

    LOW_QUALITY = "LOW_QUALITY"
    LOW_QUALITY_SCORE = "LOW_QUALITY_SCORE"
    IRRELEVANT = "IRRELEVANT"
    COPYRIGHT = "COPYRIGHT"
    INAPPROPRIATE = "INAPPROPRIATE"
    DUPLICATE = "DUPLICATE"
    POOR_AUDIO = "POOR_AUDIO"
    POOR_VIDEO = "POOR_VIDEO"
    INACCURATE_METADATA = "INACCURATE_METADATA"
    OTHER = "OTHER"


class ContentType(StrEnum):
    """Serving catalog content type."""

    VIDEO = "VIDEO"


class ContentStatus(StrEnum):
    """Serving catalog content status."""

    PUBLISHED = "PUBLISHED"
    DELETED = "DELETED"
