from conftest import make_raw_issue

from pitwall.core.jira_client import adf_doc_from_lines
from pitwall.core.mappers import adf_to_text, map_comments, map_issue, parse_dt


def test_map_issue_defaults_for_sparse_payload():
    issue = map_issue({"key": "SUP-9", "fields": {"status": None, "labels": None}})
    assert issue.key == "SUP-9"
    assert issue.summary == ""
    assert issue.status == "Unknown"
    assert issue.updated is None
    assert issue.assignee is None
    assert issue.labels == []


def test_map_issue_full_payload():
    issue = map_issue(make_raw_issue(assignee="Alice", labels=["vip"]))
    assert issue.assignee.display_name == "Alice"
    assert issue.assignee.account_id == "acct-alice"
    assert issue.labels == ["vip"]
    assert issue.updated.tzinfo is not None


def test_parse_dt_rejects_garbage():
    assert parse_dt("not a date") is None
    assert parse_dt("") is None


def test_adf_to_text_joins_blocks():
    doc = adf_doc_from_lines(["[PITWALL] Request update", "", "• What's blocking?"])
    assert adf_to_text(doc) == "[PITWALL] Request update\n\n• What's blocking?"


def test_adf_to_text_nested_nodes():
    doc = {
        "type": "doc",
        "content": [
            {
                "type": "bulletList",
                "content": [
                    {"type": "listItem", "content": [{"type": "paragraph", "content": [{"type": "text", "text": "a"}]}]},
                    {"type": "listItem", "content": [{"type": "paragraph", "content": [{"type": "text", "text": "b"}]}]},
                ],
            }
        ],
    }
    assert adf_to_text(doc) == "ab"


def test_adf_to_text_malformed_is_empty():
    assert adf_to_text(None) == ""
    assert adf_to_text(42) == ""
    assert adf_to_text({"type": "doc", "content": "oops"}) == ""
    assert adf_to_text("  plain body ") == "plain body"


def test_map_comments_skips_non_dicts():
    comments = map_comments([{"created": "2024-09-01T10:00:00.000+0000", "body": "hi"}, "junk", None])
    assert len(comments) == 1
    assert comments[0].text == "hi"
    assert comments[0].author is None
