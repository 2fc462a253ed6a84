"""Tests for metadata payload generation and commit message rendering."""

from datetime import UTC, datetime

from branchfleet.core.metadata import BranchMetadataPayload, render_commit_message

NOW = datetime(2024, 3, 5, 7, 8, 9, tzinfo=UTC)


def test_render_lists_all_fields() -> None:
    payload = BranchMetadataPayload(branch="dummy-1", base="main", created_at=NOW, token="abc123")

    assert payload.render() == (
        "branch: dummy-1\nbase: main\ncreated_at: 2024-03-05T07:08:09Z\ntoken: abc123\n"
    )


def test_generated_tokens_are_unique() -> None:
    tokens = {BranchMetadataPayload.generate("dummy-1", "main", NOW).token for _ in range(50)}

    assert len(tokens) == 50


def test_generated_token_is_hex() -> None:
    token = BranchMetadataPayload.generate("dummy-1", "main", NOW).token

    assert len(token) == 24
    int(token, 16)


def test_same_branch_same_second_renders_differently() -> None:
    first = BranchMetadataPayload.generate("dummy-1", "main", NOW)
    second = BranchMetadataPayload.generate("dummy-1", "main", NOW)

    assert first.render() != second.render()


def test_message_substitutes_every_placeholder() -> None:
    message = render_commit_message("chore: {{BRANCH}} ({{BRANCH}})", "dummy-7")

    assert message == "chore: dummy-7 (dummy-7)"


def test_message_without_placeholder_is_unchanged() -> None:
    assert render_commit_message("chore: add metadata", "dummy-7") == "chore: add metadata"
