from __future__ import annotations

import pytest

from progress_tracker.classification import (
    TagMapping,
    TagRole,
    TagTable,
    TaskClassifier,
    build_default_rules,
)
from progress_tracker.classification.tags import (
    BLOG_POST,
    CFP,
    CONTRIBUTION,
    DOC,
    METRICS_REPORT,
    NEWSLETTER,
    PODCAST,
    SHORT,
    SIDE_PROJECT,
    TALK,
    TUTORIAL_VIDEO,
    VIBE_CODE_STREAM,
)
from progress_tracker.models import Tag, Task

SIDE_PROJECT_TAG = Tag("1212903104247034", "side project")
CFP_TAG = Tag("1212892322315514", "cfp")
GOOSE_TAG = Tag("1208438924809387", "goose")
VIDEO_TAG = Tag("1204316592156190", "video")
TUTORIAL_TAG = Tag("1204316592156255", "tutorial")
BLOG_TAG = Tag("1204316592156209", "blog")
DOCS_TAG = Tag("1204316592156189", "documentation")


def task(name: str, *tags: Tag) -> Task:
    return Task(gid="t-1", name=name, tags=tags)


@pytest.fixture
def classifier() -> TaskClassifier:
    return TaskClassifier()


def test_priority_tag_overrides_exclusions(classifier: TaskClassifier) -> None:
    outcome = classifier.classify(task("prep meeting notes", SIDE_PROJECT_TAG))
    assert outcome == SIDE_PROJECT


def test_priority_tags_checked_in_fixed_order(classifier: TaskClassifier) -> None:
    outcome = classifier.classify(task("Submitted talk", CFP_TAG, SIDE_PROJECT_TAG))
    assert outcome == SIDE_PROJECT


def test_priority_tag_matched_by_name_when_id_unknown(classifier: TaskClassifier) -> None:
    outcome = classifier.classify(task("weekly sync", Tag("000", "CFP")))
    assert outcome == CFP


def test_exclusion_vetoes_shorts_keyword(classifier: TaskClassifier) -> None:
    assert classifier.classify(task("Schedule shorts for next week")) is None


def test_exclusion_vetoes_shorts_with_video_tag(classifier: TaskClassifier) -> None:
    assert classifier.classify(task("Share video on socials", VIDEO_TAG)) is None


def test_generic_contribution_tag_requires_confirmation(classifier: TaskClassifier) -> None:
    assert classifier.classify(task("goose sighting at the park", GOOSE_TAG)) is None


def test_generic_contribution_tag_with_confirmation(classifier: TaskClassifier) -> None:
    outcome = classifier.classify(task("Merged PR fixing recipe loader", GOOSE_TAG))
    assert outcome == CONTRIBUTION


def test_generic_contribution_tag_rejected_by_exclusion(classifier: TaskClassifier) -> None:
    assert classifier.classify(task("Prepare goose demo, fixed slides", GOOSE_TAG)) is None


def test_written_tutorial_goes_to_docs(classifier: TaskClassifier) -> None:
    assert classifier.classify(task("Wrote a tutorial on skills")) == DOC


def test_recorded_tutorial_goes_to_videos(classifier: TaskClassifier) -> None:
    assert classifier.classify(task("Recorded a tutorial on skills")) == TUTORIAL_VIDEO


def test_tutorial_tag_defaults_to_docs(classifier: TaskClassifier) -> None:
    assert classifier.classify(task("Wrote a tutorial on skills", TUTORIAL_TAG)) == DOC
    assert classifier.classify(task("Tutorial on skills", TUTORIAL_TAG, VIDEO_TAG)) == TUTORIAL_VIDEO
    assert classifier.classify(task("Filmed tutorial on recipes", TUTORIAL_TAG)) == TUTORIAL_VIDEO


def test_tutorial_tag_wins_over_goose_docs_keyword(classifier: TaskClassifier) -> None:
    outcome, rule = classifier.explain(task("goose doc update", TUTORIAL_TAG))
    assert outcome == DOC
    assert rule == "tags:id"


def test_video_tag_refined_by_name(classifier: TaskClassifier) -> None:
    assert classifier.classify(task("Quick tip: recipes in 60s", VIDEO_TAG)) == SHORT
    assert classifier.classify(task("Flight school episode 3", VIDEO_TAG)) == TUTORIAL_VIDEO
    assert classifier.classify(task("Demo of recipes", VIDEO_TAG)) == SHORT


def test_identifier_lookup_takes_precedence_over_name(classifier: TaskClassifier) -> None:
    outcome = classifier.classify(task("Episode notes", Tag(BLOG_TAG.gid, "podcast")))
    assert outcome == BLOG_POST


def test_name_lookup_used_for_unknown_identifier(classifier: TaskClassifier) -> None:
    outcome, rule = classifier.explain(task("Episode 12 with Jane", Tag("999", "Podcast")))
    assert outcome == PODCAST
    assert rule == "tags:name"


def test_standard_tag_respects_exclusions(classifier: TaskClassifier) -> None:
    assert classifier.classify(task("Promo blog on LinkedIn", BLOG_TAG)) is None


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Vibe code livestream: building a recipe browser", VIBE_CODE_STREAM),
        ("Wrote blog post about subagents", BLOG_POST),
        ("Submitted CFP to KubeCon", CFP),
        ("Gave a talk at PyCon", TALK),
        ("Guest recording with the changelog", PODCAST),
        ("Published newsletter issue #4", NEWSLETTER),
        ("Community metrics report January", METRICS_REPORT),
        ("Side project: built a recipe browser", SIDE_PROJECT),
        ("Updated goose docs for recipes", DOC),
        ("Closed issue #123 in goose", CONTRIBUTION),
    ],
)
def test_keyword_cascade(classifier: TaskClassifier, name: str, expected) -> None:
    assert classifier.classify(task(name)) == expected


@pytest.mark.parametrize(
    "name",
    [
        "Newsletter draft",
        "Expense report for conference",
        "Promo blog on LinkedIn",
        "Blog",
        "Lunch with the team",
        "Learn goose basics",
    ],
)
def test_keyword_cascade_rejects(classifier: TaskClassifier, name: str) -> None:
    assert classifier.classify(task(name)) is None


def test_classification_is_deterministic(classifier: TaskClassifier) -> None:
    subject = task("Recorded MCP apps tutorial", VIDEO_TAG, DOCS_TAG)
    assert classifier.classify(subject) == classifier.classify(subject)
    assert classifier.classify(subject) == TaskClassifier().classify(subject)


def test_explicit_contribution_role_accepts_unconditionally() -> None:
    table = TagTable({"42": TagMapping(CONTRIBUTION, TagRole.EXPLICIT_CONTRIBUTION)}, {})
    classifier = TaskClassifier(build_default_rules(table))

    assert classifier.classify(task("goose demo meeting", Tag("42", "anything"))) == CONTRIBUTION


def test_explain_reports_rule_name(classifier: TaskClassifier) -> None:
    assert classifier.explain(task("Wrote blog post about recipes"))[1] == "keyword:blog"
    assert classifier.explain(task("Lunch with the team")) == (None, None)


def test_default_tables_use_priority_role_for_explicit_contribution() -> None:
    table = build_default_rules()[3].table
    roles = {mapping.role for mapping in (*table.by_id.values(), *table.by_name.values())}

    assert TagRole.EXPLICIT_CONTRIBUTION not in roles
    assert table.by_name["goose contribution"].role is TagRole.PRIORITY
