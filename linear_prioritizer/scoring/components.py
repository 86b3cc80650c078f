"""Scoring components.

Each function is pure and computes one sub-score in [0, 100] from an issue.
Time-dependent components take an explicit ``now`` so results are
reproducible.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from ..linear_client.models import LinearComment, LinearIssue
from .models import ComplexityEstimate, ComplexityLevel, PriorityScore, PrioritySource

# Linear native priority: 0=No priority, 1=Urgent, 2=High, 3=Medium, 4=Low
NATIVE_PRIORITY_SCORES = {1: 100.0, 2: 70.0, 3: 40.0, 4: 20.0}
NATIVE_PRIORITY_NAMES = {0: "None", 1: "Urgent", 2: "High", 3: "Medium", 4: "Low"}

LABEL_PRIORITY_SCORES = {"P1": 100.0, "P2": 70.0, "P3": 40.0}
DEFAULT_LABEL_PRIORITY = "P3"
PRIORITY_LABEL_PREFIX = "Priority:"

TITLE_KEYWORD_POINTS = 20
DESCRIPTION_KEYWORD_POINTS = 10
LABEL_KEYWORD_POINTS = 15
TARGET_PROJECT_SCORE = 100.0

# (max age in days, score); ages beyond the last bucket score 0
RECENCY_BUCKETS = [(30, 100.0), (90, 80.0), (180, 50.0), (365, 10.0)]

SYNC_COMMENT_MARKERS = ("This comment thread is synced", "automatically moved")
TRACKER_EMAIL_DOMAIN = "linear.app"
COMMENT_POINTS = 10
EXTERNAL_COMMENT_POINTS = 15
UNIQUE_EXTERNAL_POINTS = 10
COMMENT_CAP = 50
EXTERNAL_CAP = 50
UNIQUE_EXTERNAL_CAP = 20

COMPLEXITY_SCORES = {
    ComplexityLevel.LOW: 100.0,
    ComplexityLevel.MEDIUM: 70.0,
    ComplexityLevel.HIGH: 40.0,
}
HIGH_ESTIMATE_THRESHOLD = 8
MEDIUM_ESTIMATE_THRESHOLD = 3
LONG_DESCRIPTION_CHARS = 1000
SHORT_DESCRIPTION_CHARS = 200
COMPLEXITY_LABELS = [
    ("complexity:high", ComplexityLevel.HIGH),
    ("complexity:hard", ComplexityLevel.HIGH),
    ("complexity:medium", ComplexityLevel.MEDIUM),
    ("complexity:low", ComplexityLevel.LOW),
    ("complexity:easy", ComplexityLevel.LOW),
]
COMPLEXITY_INDICATORS = [
    "complex",
    "difficult",
    "challenging",
    "refactor",
    "rewrite",
    "overhaul",
    "architecture",
    "redesign",
    "major",
    "significant",
]
SIMPLICITY_INDICATORS = [
    "simple",
    "easy",
    "quick",
    "trivial",
    "straightforward",
    "minor",
    "typo",
    "text",
    "label",
    "wording",
]


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp a score into [low, high]."""
    return max(low, min(high, value))


def extract_label_priority(issue: LinearIssue) -> str:
    """Return P1, P2 or P3 from the first ``Priority:P*`` label, default P3."""
    for label in issue.labels:
        if not label.name.startswith(PRIORITY_LABEL_PREFIX):
            continue
        token = label.name[len(PRIORITY_LABEL_PREFIX) :]
        for level in LABEL_PRIORITY_SCORES:
            if token.startswith(level):
                return level
    return DEFAULT_LABEL_PRIORITY


def native_priority_name(priority: int | None) -> str:
    """Map Linear's numeric priority to its display name."""
    if priority is None:
        return "None"
    return NATIVE_PRIORITY_NAMES.get(priority, "None")


def calculate_priority_score(issue: LinearIssue) -> PriorityScore:
    """Score issue priority.

    A native priority (1-4) takes precedence over priority labels. When the
    native priority is unset (absent or 0), the label decides.
    """
    label_priority = extract_label_priority(issue)
    native_name = native_priority_name(issue.priority)

    if issue.priority in NATIVE_PRIORITY_SCORES:
        return PriorityScore(
            score=NATIVE_PRIORITY_SCORES[issue.priority],
            label_priority=label_priority,
            native_priority=native_name,
            source=PrioritySource.NATIVE,
        )

    return PriorityScore(
        score=LABEL_PRIORITY_SCORES[label_priority],
        label_priority=label_priority,
        native_priority=native_name,
        source=PrioritySource.LABEL,
    )


def calculate_project_relevance(
    issue: LinearIssue,
    relevance_keywords: Sequence[str],
    target_project: str | None = None,
) -> float:
    """Score topical relevance from keywords in title, description and labels.

    Issues in the target project score 100 outright. Matching is a
    case-insensitive substring search.
    """
    if target_project and issue.project and issue.project.name == target_project:
        return TARGET_PROJECT_SCORE

    keywords = [k.lower() for k in relevance_keywords if k]
    title = issue.title.lower()
    description = (issue.description or "").lower()

    score = 0
    for keyword in keywords:
        if keyword in title:
            score += TITLE_KEYWORD_POINTS
        if keyword in description:
            score += DESCRIPTION_KEYWORD_POINTS

    for label in issue.labels:
        label_name = label.name.lower()
        for keyword in keywords:
            if keyword in label_name:
                score += LABEL_KEYWORD_POINTS

    return clamp(float(score))


def calculate_recency_score(updated_at: datetime | None, now: datetime) -> float:
    """Score how recently an issue was updated, stepping down with age."""
    if updated_at is None:
        return 0.0

    age_days = (_as_utc(now) - _as_utc(updated_at)).total_seconds() / 86400
    for max_days, score in RECENCY_BUCKETS:
        if age_days < max_days:
            return score
    return 0.0


def is_system_comment(comment: LinearComment) -> bool:
    """True for integration/sync comments that carry no human signal."""
    if comment.user is None:
        return True
    if any(marker in comment.body for marker in SYNC_COMMENT_MARKERS):
        return True
    email = comment.user.email or ""
    return TRACKER_EMAIL_DOMAIN in email.lower()


def is_internal_author(comment: LinearComment, employee_aliases: Iterable[str]) -> bool:
    """True when the author matches an employee alias by email or name.

    Aliases starting with ``@`` match an email domain.
    """
    user = comment.user
    if user is None:
        return False

    email = (user.email or "").lower()
    names = {n.lower() for n in (user.name, user.display_name) if n}

    for alias in employee_aliases:
        alias = alias.strip().lower()
        if not alias:
            continue
        if alias.startswith("@"):
            if email.endswith(alias):
                return True
        elif alias == email or alias in names:
            return True
    return False


def estimate_interactions(
    comments: Sequence[LinearComment],
    employee_aliases: Iterable[str] = (),
) -> float:
    """Score human discussion on an issue, weighting external voices higher."""
    aliases = list(employee_aliases)
    human_comments = 0
    external_comments = 0
    external_authors: set[str] = set()

    for comment in comments:
        if is_system_comment(comment):
            continue
        human_comments += 1
        if is_internal_author(comment, aliases):
            continue
        external_comments += 1
        user = comment.user
        if user is not None:
            author = user.email or user.name or user.display_name or user.id
            external_authors.add(author.lower())

    score = min(COMMENT_CAP, human_comments * COMMENT_POINTS)
    score += min(EXTERNAL_CAP, external_comments * EXTERNAL_COMMENT_POINTS)
    if len(external_authors) > 1:
        unique_points = len(external_authors) * UNIQUE_EXTERNAL_POINTS
        score += min(UNIQUE_EXTERNAL_CAP, unique_points)

    return clamp(float(score))


def estimate_complexity(issue: LinearIssue) -> ComplexityEstimate:
    """Estimate effort. Lower effort yields a higher score.

    Signals in order: numeric estimate, complexity label, description
    length, indicator words, then a Medium default.
    """
    level, basis = _complexity_level(issue)
    return ComplexityEstimate(level=level, score=COMPLEXITY_SCORES[level], basis=basis)


def _complexity_level(issue: LinearIssue) -> tuple[ComplexityLevel, str]:
    if issue.estimate is not None:
        if issue.estimate > HIGH_ESTIMATE_THRESHOLD:
            return ComplexityLevel.HIGH, "estimate"
        if issue.estimate > MEDIUM_ESTIMATE_THRESHOLD:
            return ComplexityLevel.MEDIUM, "estimate"
        return ComplexityLevel.LOW, "estimate"

    for label in issue.labels:
        name = label.name.lower()
        for marker, level in COMPLEXITY_LABELS:
            if marker in name:
                return level, "label"

    description = issue.description or ""
    if len(description) > LONG_DESCRIPTION_CHARS:
        return ComplexityLevel.HIGH, "description_length"
    if len(description) < SHORT_DESCRIPTION_CHARS:
        return ComplexityLevel.LOW, "description_length"

    text = f"{issue.title} {description}".lower()
    if any(word in text for word in COMPLEXITY_INDICATORS):
        return ComplexityLevel.HIGH, "keywords"
    if any(word in text for word in SIMPLICITY_INDICATORS):
        return ComplexityLevel.LOW, "keywords"

    return ComplexityLevel.MEDIUM, "default"


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken to be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
