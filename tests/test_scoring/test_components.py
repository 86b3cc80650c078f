"""Tests for individual scoring components."""

from collections.abc import Callable
from datetime import datetime, timedelta

import pytest

from linear_prioritizer.linear_client.models import LinearComment, LinearIssue
from linear_prioritizer.scoring.components import (
    calculate_priority_score,
    calculate_project_relevance,
    calculate_recency_score,
    clamp,
    estimate_complexity,
    estimate_interactions,
    extract_label_priority,
    is_internal_author,
    is_system_comment,
)
from linear_prioritizer.scoring.models import ComplexityLevel, PrioritySource

IssueFactory = Callable[..., LinearIssue]
CommentFactory = Callable[..., LinearComment]


def test_clamp_bounds() -> None:
    """Test clamping into [0, 100]."""
    assert clamp(-5) == 0
    assert clamp(150) == 100
    assert clamp(42.5) == 42.5


class TestPriorityScore:
    """Test priority scoring."""

    @pytest.mark.parametrize(
        "priority,expected",
        [(1, 100.0), (2, 70.0), (3, 40.0), (4, 20.0)],
    )
    def test_native_priority(
        self, issue_factory: IssueFactory, priority: int, expected: float
    ) -> None:
        """Test native priority levels map to fixed scores."""
        result = calculate_priority_score(issue_factory(priority=priority))
        assert result.score == expected
        assert result.source == PrioritySource.NATIVE

    def test_label_priority_when_native_unset(
        self, issue_factory: IssueFactory
    ) -> None:
        """Test label decides when there is no native priority."""
        result = calculate_priority_score(issue_factory(labels=["Priority:P1"]))
        assert result.score == 100.0
        assert result.label_priority == "P1"
        assert result.native_priority == "None"
        assert result.source == PrioritySource.LABEL

    def test_native_zero_counts_as_unset(self, issue_factory: IssueFactory) -> None:
        """Test priority 0 (No priority) falls back to labels."""
        result = calculate_priority_score(
            issue_factory(priority=0, labels=["Priority:P2"])
        )
        assert result.score == 70.0
        assert result.source == PrioritySource.LABEL

    def test_native_wins_over_label(self, issue_factory: IssueFactory) -> None:
        """Test native priority takes precedence even when a label is higher."""
        result = calculate_priority_score(
            issue_factory(priority=4, labels=["Priority:P1"])
        )
        assert result.score == 20.0
        assert result.label_priority == "P1"
        assert result.native_priority == "Low"
        assert result.source == PrioritySource.NATIVE

    def test_default_is_p3(self, issue_factory: IssueFactory) -> None:
        """Test issues without any priority signal default to P3."""
        result = calculate_priority_score(issue_factory(labels=["bug"]))
        assert result.score == 40.0
        assert result.label_priority == "P3"

    def test_extract_label_priority_uses_first_match(
        self, issue_factory: IssueFactory
    ) -> None:
        """Test the first recognized priority label is used."""
        issue = issue_factory(labels=["Priority:P2 - High", "Priority:P1"])
        assert extract_label_priority(issue) == "P2"

    def test_extract_label_priority_ignores_unknown_token(
        self, issue_factory: IssueFactory
    ) -> None:
        """Test unrecognized priority labels are skipped."""
        issue = issue_factory(labels=["Priority:P9", "priority:p1"])
        assert extract_label_priority(issue) == "P3"


class TestProjectRelevance:
    """Test relevance scoring."""

    def test_target_project_short_circuits(
        self, issue_factory: IssueFactory
    ) -> None:
        """Test issues in the target project score 100."""
        issue = issue_factory(title="Unrelated", project="Platform")
        assert calculate_project_relevance(issue, [], "Platform") == 100.0

    def test_other_project_uses_keywords(self, issue_factory: IssueFactory) -> None:
        """Test a non-target project falls through to keyword scoring."""
        issue = issue_factory(title="Unrelated", project="Mobile")
        assert calculate_project_relevance(issue, ["sync"], "Platform") == 0.0

    def test_title_outweighs_description(self, issue_factory: IssueFactory) -> None:
        """Test a title hit is worth more than a description hit."""
        in_title = issue_factory(title="Fix sync bug")
        in_description = issue_factory(title="Fix bug", description="sync fails")
        title_score = calculate_project_relevance(in_title, ["sync"])
        description_score = calculate_project_relevance(in_description, ["sync"])
        assert title_score == 20.0
        assert description_score == 10.0
        assert title_score > description_score

    def test_label_hit_has_highest_weight(self, issue_factory: IssueFactory) -> None:
        """Test a keyword inside a label name scores the most per hit."""
        issue = issue_factory(title="Fix bug", labels=["area:sync"])
        assert calculate_project_relevance(issue, ["sync"]) == 15.0

    def test_case_insensitive_substring(self, issue_factory: IssueFactory) -> None:
        """Test matching ignores case and is not token based."""
        issue = issue_factory(title="Resynchronize METADATA store")
        assert calculate_project_relevance(issue, ["sync", "Metadata"]) == 40.0

    def test_clamped_to_100(self, issue_factory: IssueFactory) -> None:
        """Test many hits cannot exceed 100."""
        keywords = ["a", "b", "c", "d", "e"]
        issue = issue_factory(
            title="a b c d e",
            description="a b c d e",
            labels=["a b c d e"],
        )
        assert calculate_project_relevance(issue, keywords) == 100.0

    def test_no_keywords(self, issue_factory: IssueFactory) -> None:
        """Test relevance is 0 without keywords or a target project."""
        assert calculate_project_relevance(issue_factory(), []) == 0.0


class TestRecencyScore:
    """Test recency scoring."""

    @pytest.mark.parametrize(
        "age_days,expected",
        [(0, 100.0), (29, 100.0), (45, 80.0), (120, 50.0), (300, 10.0), (400, 0.0)],
    )
    def test_buckets(self, now: datetime, age_days: int, expected: float) -> None:
        """Test each age bucket."""
        updated_at = now - timedelta(days=age_days)
        assert calculate_recency_score(updated_at, now) == expected

    def test_monotonically_non_increasing(self, now: datetime) -> None:
        """Test older issues never score higher than newer ones."""
        scores = [
            calculate_recency_score(now - timedelta(days=days), now)
            for days in range(0, 500, 7)
        ]
        assert scores == sorted(scores, reverse=True)

    def test_missing_timestamp(self, now: datetime) -> None:
        """Test a missing update time scores 0."""
        assert calculate_recency_score(None, now) == 0.0

    def test_naive_timestamp_treated_as_utc(self, now: datetime) -> None:
        """Test naive datetimes are compared as UTC."""
        naive = (now - timedelta(days=10)).replace(tzinfo=None)
        assert calculate_recency_score(naive, now) == 100.0


class TestInteractions:
    """Test interaction scoring."""

    def test_no_comments(self) -> None:
        """Test an issue without comments scores 0."""
        assert estimate_interactions([]) == 0.0

    def test_system_comments_ignored(self, comment_factory: CommentFactory) -> None:
        """Test integration and sync comments carry no weight."""
        comments = [
            comment_factory("c1", no_user=True),
            comment_factory("c2", body="This comment thread is synced to Slack"),
            comment_factory("c3", email="bot@linear.app"),
        ]
        assert all(is_system_comment(c) for c in comments)
        assert estimate_interactions(comments) == 0.0

    def test_single_external_comment(self, comment_factory: CommentFactory) -> None:
        """Test one external comment counts as human and external."""
        assert estimate_interactions([comment_factory()]) == 25.0

    def test_internal_comment(self, comment_factory: CommentFactory) -> None:
        """Test comments by employees count only as human discussion."""
        comment = comment_factory(email="dev@example.com")
        assert estimate_interactions([comment], ["@example.com"]) == 10.0

    def test_multiple_external_authors_bonus(
        self, comment_factory: CommentFactory
    ) -> None:
        """Test distinct external authors add a bonus."""
        comments = [
            comment_factory("c1", email="a@one.com"),
            comment_factory("c2", email="b@two.com"),
        ]
        # 2 human * 10 + 2 external * 15 + 2 authors * 10
        assert estimate_interactions(comments) == 70.0

    def test_bounded(self, comment_factory: CommentFactory) -> None:
        """Test a long thread stays within [0, 100]."""
        comments = [
            comment_factory(f"c{i}", email=f"user{i}@customer.com")
            for i in range(30)
        ]
        assert estimate_interactions(comments) == 100.0

    def test_more_external_comments_never_lower(
        self, comment_factory: CommentFactory
    ) -> None:
        """Test adding an external comment does not reduce the score."""
        comments = [comment_factory("c0", email="dev@example.com")]
        previous = estimate_interactions(comments, ["@example.com"])
        for i in range(1, 8):
            comments.append(comment_factory(f"c{i}", email=f"u{i}@customer.com"))
            current = estimate_interactions(comments, ["@example.com"])
            assert current >= previous
            previous = current

    def test_alias_matching(self, comment_factory: CommentFactory) -> None:
        """Test aliases match emails, names and email domains."""
        by_email = comment_factory(email="Dev@Example.com")
        by_name = comment_factory(name="Alex Dev", email="alex@gmail.com")
        outsider = comment_factory(name="Sam", email="sam@example.org")

        assert is_internal_author(by_email, ["dev@example.com"])
        assert is_internal_author(by_name, ["alex dev"])
        assert is_internal_author(by_email, ["@example.com"])
        assert not is_internal_author(outsider, ["@example.com", "alex dev"])


class TestComplexity:
    """Test complexity estimation."""

    @pytest.mark.parametrize(
        "estimate,level",
        [
            (1, ComplexityLevel.LOW),
            (3, ComplexityLevel.LOW),
            (5, ComplexityLevel.MEDIUM),
            (8, ComplexityLevel.MEDIUM),
            (13, ComplexityLevel.HIGH),
        ],
    )
    def test_estimate_thresholds(
        self, issue_factory: IssueFactory, estimate: float, level: ComplexityLevel
    ) -> None:
        """Test numeric estimates map to effort levels."""
        result = estimate_complexity(issue_factory(estimate=estimate))
        assert result.level == level
        assert result.basis == "estimate"

    def test_lower_effort_scores_higher(self, issue_factory: IssueFactory) -> None:
        """Test the score is inverted relative to effort."""
        low = estimate_complexity(issue_factory(estimate=1)).score
        medium = estimate_complexity(issue_factory(estimate=5)).score
        high = estimate_complexity(issue_factory(estimate=13)).score
        assert low > medium > high

    def test_estimate_beats_label(self, issue_factory: IssueFactory) -> None:
        """Test an explicit estimate takes precedence over labels."""
        issue = issue_factory(estimate=1, labels=["Complexity:High"])
        assert estimate_complexity(issue).level == ComplexityLevel.LOW

    def test_label(self, issue_factory: IssueFactory) -> None:
        """Test complexity labels are used without an estimate."""
        result = estimate_complexity(issue_factory(labels=["complexity:hard"]))
        assert result.level == ComplexityLevel.HIGH
        assert result.basis == "label"

    def test_long_description(self, issue_factory: IssueFactory) -> None:
        """Test long descriptions suggest high effort."""
        result = estimate_complexity(issue_factory(description="x" * 1500))
        assert result.level == ComplexityLevel.HIGH
        assert result.basis == "description_length"

    def test_short_description(self, issue_factory: IssueFactory) -> None:
        """Test short descriptions suggest low effort."""
        result = estimate_complexity(issue_factory(description="Small tweak"))
        assert result.level == ComplexityLevel.LOW
        assert result.basis == "description_length"

    def test_indicator_words(self, issue_factory: IssueFactory) -> None:
        """Test indicator words decide for medium length descriptions."""
        padding = "y" * 300
        hard = issue_factory(title="Refactor the pipeline", description=padding)
        easy = issue_factory(title="Fix typo", description=padding)
        assert estimate_complexity(hard).level == ComplexityLevel.HIGH
        assert estimate_complexity(easy).level == ComplexityLevel.LOW
        assert estimate_complexity(easy).basis == "keywords"

    def test_default_medium(self, issue_factory: IssueFactory) -> None:
        """Test the default when no signal matches."""
        issue = issue_factory(title="Investigate", description="y" * 300)
        result = estimate_complexity(issue)
        assert result.level == ComplexityLevel.MEDIUM
        assert result.basis == "default"
