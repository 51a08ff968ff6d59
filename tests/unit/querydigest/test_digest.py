"""Tests for batch fingerprint classification."""

import json

from querydigest.config.limits import FingerprintLimits
from querydigest.digest import digest_queries, split_statements
from querydigest.errors import ErrorCode, StructuralError


def test_digest_groups_queries_by_fingerprint():
    """Literal variants land in one class, ordered by count."""
    report = digest_queries(
        [
            "SELECT * FROM t WHERE id=1",
            "SELECT b FROM u",
            "select * from t where id=2",
            "",
            "SELECT * FROM t WHERE id=3",
        ]
    )

    assert report.total_queries == 4
    assert report.distinct_fingerprints == 2
    top = report.classes[0]
    assert top.fingerprint == "select * from t where id=?"
    assert top.count == 3
    assert top.sample == "SELECT * FROM t WHERE id=1"
    assert top.first_seen_index == 0
    assert report.classes[1].fingerprint == "select b from u"
    assert report.classes[1].first_seen_index == 1
    assert report.skipped == []


def test_digest_ties_keep_first_seen_order():
    """Classes with equal counts are ordered by first appearance."""
    report = digest_queries(["SELECT b FROM u", "SELECT a FROM t"])

    assert [c.fingerprint for c in report.classes] == ["select b from u", "select a from t"]


def test_digest_flags_structural_errors_and_continues(monkeypatch):
    """A failing record is skipped without aborting the batch."""
    import querydigest.digest as digest_module

    real_fingerprint = digest_module.fingerprint

    def _fake_fingerprint(query, *, limits=None):
        if "broken" in query:
            raise StructuralError(branches=3, separators=1)
        return real_fingerprint(query, limits=limits)

    monkeypatch.setattr(digest_module, "fingerprint", _fake_fingerprint)

    report = digest_queries(["SELECT 1", "SELECT broken", "SELECT 2"])

    assert report.total_queries == 3
    assert len(report.classes) == 1
    assert report.classes[0].count == 2
    assert len(report.skipped) == 1
    assert report.skipped[0].index == 1
    assert report.skipped[0].error_code == ErrorCode.STRUCTURAL_ERROR
    assert "3 union branches" in report.skipped[0].message


def test_digest_flags_oversized_queries():
    """Length limits apply per record."""
    report = digest_queries(
        ["SELECT 1", "SELECT * FROM a_rather_long_table_name"],
        limits=FingerprintLimits(max_query_length=10),
    )

    assert report.classes[0].fingerprint == "select ?"
    assert report.skipped[0].error_code == ErrorCode.QUERY_TOO_LARGE


def test_digest_checksums_match_fingerprint_classes():
    """Every class carries a 16-digit checksum."""
    report = digest_queries(["SELECT 1", "SELECT 2"])

    assert len(report.classes) == 1
    assert len(report.classes[0].checksum) == 16


def test_report_top_and_json_round_trip():
    """Reports serialize to JSON and can be truncated."""
    report = digest_queries(["SELECT a FROM t", "SELECT a FROM t", "SELECT b FROM u"])

    top = report.top(1)
    payload = json.loads(top.model_dump_json())

    assert len(top.classes) == 1
    assert len(report.classes) == 2
    assert payload["classes"][0]["fingerprint"] == "select a from t"
    assert payload["classes"][0]["count"] == 2


def test_split_statements_by_line():
    """Blank lines are dropped and whitespace trimmed."""
    assert split_statements("SELECT 1\n\n  SELECT 2  \n") == ["SELECT 1", "SELECT 2"]


def test_split_statements_by_delimiter():
    """Multi-line statements can be split on a delimiter."""
    text = "SELECT a\nFROM t;\nSELECT b FROM u;\n"
    assert split_statements(text, delimiter=";") == ["SELECT a\nFROM t", "SELECT b FROM u"]
