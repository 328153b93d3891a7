"""Tests for the audit validate-and-partition stage."""

from nodewatch.audit.errors import MALFORMED_SUBMISSION, OUT_OF_WINDOW_SUBMISSION
from nodewatch.audit.partition import partition_submissions, round_window

ROUND_TIME = 1_000


def _submission(submitter: str = "a", timestamp: int = 3_500, **overrides) -> dict:
    data = {
        "submitter": submitter,
        "round": 3,
        "timestamp": timestamp,
        "networkScore": 50.0,
        "nodes": [{
            "endpoint": "https://rpc-a",
            "blockHeight": 10,
            "tps": 1.5,
            "health": "healthy",
            "responseTime": 100,
        }],
    }
    data.update(overrides)
    return data


class TestRoundWindow:

    def test_half_open_window(self):
        assert round_window(3, ROUND_TIME) == (3_000, 4_000)


class TestPartitionSubmissions:

    def test_accepts_well_formed(self):
        p = partition_submissions([_submission()], 3, ROUND_TIME)
        assert len(p.accepted) == 1
        assert p.rejected == []
        assert p.accepted[0].nodes[0].block_height == 10

    def test_window_edges(self):
        batch = [
            _submission("start", timestamp=3_000),
            _submission("last", timestamp=3_999),
            _submission("end", timestamp=4_000),
            _submission("early", timestamp=2_999),
        ]
        p = partition_submissions(batch, 3, ROUND_TIME)
        assert [s.submitter for s in p.accepted] == ["start", "last"]
        assert [r.index for r in p.out_of_window] == [2, 3]
        assert all(r.reason == OUT_OF_WINDOW_SUBMISSION for r in p.out_of_window)

    def test_malformed_entries(self):
        batch = [
            None,
            "not a submission",
            {"submitter": "no-nodes", "round": 3, "timestamp": 3_500, "networkScore": 1.0},
            _submission("nodes-not-list", nodes="oops"),
            _submission("string-height", nodes=[{
                "endpoint": "e", "blockHeight": "10", "tps": 1.0,
                "health": "healthy", "responseTime": 1,
            }]),
            _submission("sentinel", nodes=[{
                "endpoint": "e", "blockHeight": 0, "tps": 0.0,
                "health": "offline", "responseTime": -1,
            }]),
            _submission("bad-score", networkScore=150.0),
            _submission("bool-height", nodes=[{
                "endpoint": "e", "blockHeight": True, "tps": 1.0,
                "health": "healthy", "responseTime": 1,
            }]),
        ]
        p = partition_submissions(batch, 3, ROUND_TIME)
        assert p.accepted == []
        assert [r.index for r in p.malformed] == list(range(len(batch)))
        assert all(r.reason == MALFORMED_SUBMISSION for r in p.malformed)

    def test_duplicate_endpoints_are_malformed(self):
        node = _submission()["nodes"][0]
        p = partition_submissions([_submission(nodes=[node, node])], 3, ROUND_TIME)
        assert len(p.malformed) == 1
        assert "duplicate endpoint" in p.malformed[0].detail

    def test_empty_nodes_is_well_formed(self):
        p = partition_submissions([_submission(nodes=[])], 3, ROUND_TIME)
        assert len(p.accepted) == 1

    def test_integer_tps_accepted(self):
        node = dict(_submission()["nodes"][0], tps=3)
        p = partition_submissions([_submission(nodes=[node])], 3, ROUND_TIME)
        assert p.accepted[0].nodes[0].tps == 3.0

    def test_preserves_order(self):
        batch = [_submission("c"), None, _submission("a"), _submission("b")]
        p = partition_submissions(batch, 3, ROUND_TIME)
        assert [s.submitter for s in p.accepted] == ["c", "a", "b"]

    def test_infinite_tps_is_malformed(self):
        node = dict(_submission()["nodes"][0], tps=float("inf"))
        batch = [_submission("a", nodes=[node]), _submission("b", nodes=[node])]
        p = partition_submissions(batch, 3, ROUND_TIME)
        assert p.accepted == []
        assert [r.index for r in p.malformed] == [0, 1]
