"""Tests for the RPSL record framing parser."""

import pytest

from bulk_whois.errors import ConfigurationError
from bulk_whois.parse.rpsl import (
    FramerState,
    RecordFramer,
    get_key_value,
    merge_attribute,
    normalize_record,
    parse_records,
)


def accept_all(record):
    return True


def lines_of(text):
    return text.split("\n")


class TestGetKeyValue:
    """Tests for splitting attribute lines."""

    def test_simple_attribute(self):
        assert get_key_value("nic-hdl:   JD1-TEST") == ("nic-hdl", "JD1-TEST")

    def test_splits_at_first_colon_only(self):
        assert get_key_value("remarks: see http://example.com") == (
            "remarks",
            "see http://example.com",
        )

    def test_ipv6_value_kept_whole(self):
        assert get_key_value("inet6num: 2001:db8::/32") == ("inet6num", "2001:db8::/32")

    def test_empty_value_is_ignored(self):
        assert get_key_value("remarks:") == (None, None)
        assert get_key_value("remarks:     ") == (None, None)

    def test_empty_key_is_ignored(self):
        assert get_key_value(":value") == (None, None)
        assert get_key_value("   : value") == (None, None)

    def test_line_without_colon_is_ignored(self):
        assert get_key_value("                continuation text") == (None, None)

    def test_comment_keys_are_ignored(self):
        assert get_key_value("# comment: text") == (None, None)
        assert get_key_value("% Note: this output has been filtered") == (None, None)


class TestMergeAttribute:
    """Tests for the repeated attribute merge rule."""

    def test_first_occurrence_is_scalar(self):
        record = {"person": "John Doe"}
        merge_attribute(record, "phone", "+1 555 0100")
        assert record["phone"] == "+1 555 0100"

    def test_repeated_values_keep_source_order(self):
        record = {"person": "John Doe"}
        for value in ("v1", "v2", "v3"):
            merge_attribute(record, "address", value)
        assert record["address"] == ["v1", "v2", "v3"]


class TestNormalizeRecord:
    """Tests for the always-list attributes."""

    def test_single_remarks_and_members_become_lists(self):
        record = normalize_record({"as-set": "AS-TEST", "remarks": "r", "members": "AS1"})
        assert record["remarks"] == ["r"]
        assert record["members"] == ["AS1"]

    def test_other_attributes_untouched(self):
        record = normalize_record({"person": "John Doe", "phone": "1"})
        assert record == {"person": "John Doe", "phone": "1"}

    def test_lists_are_not_nested(self):
        record = normalize_record({"as-set": "AS-TEST", "members": ["AS1", "AS2"]})
        assert record["members"] == ["AS1", "AS2"]


class TestParseRecords:
    """Tests for parsing records from lines."""

    def test_two_persons_and_role_example(self, sample_text):
        records = parse_records(lines_of(sample_text), "person", accept_all)

        assert len(records) == 2
        assert records[0]["person"] == "John Doe"
        assert records[0]["remarks"] == ["first person"]
        assert records[1]["person"] == "Jane Roe"
        assert records[1]["address"] == ["Side Street 3", "Building B", "Floor 4"]
        assert all("role" not in r for r in records)

    def test_other_type_selected(self, sample_text):
        records = parse_records(lines_of(sample_text), "role", accept_all)

        assert len(records) == 1
        assert records[0]["role"] == "Network Operations"
        assert records[0]["remarks"] == ["role remark"]

    def test_records_in_source_order(self):
        text = "aut-num: AS3\n\naut-num: AS1\n\naut-num: AS2\n\n"
        records = parse_records(lines_of(text), "aut-num", accept_all)
        assert [r["aut-num"] for r in records] == ["AS3", "AS1", "AS2"]

    def test_unterminated_record_is_dropped(self):
        text = "person: A\nnic-hdl: A1\n\nperson: B\nnic-hdl: B1"
        records = parse_records(lines_of(text), "person", accept_all)
        assert [r["person"] for r in records] == ["A"]

    def test_type_prefix_must_match_exactly(self):
        text = "person-extra: nope\nnic-hdl: X\n\nperson: yes\n\n"
        records = parse_records(lines_of(text), "person", accept_all)
        assert records == [{"person": "yes"}]

    def test_whitespace_only_line_does_not_close_record(self):
        text = "person: A\n   \nnic-hdl: A1\n\n"
        records = parse_records(lines_of(text), "person", accept_all)
        assert records == [{"person": "A", "nic-hdl": "A1"}]

    def test_malformed_and_comment_lines_are_ignored(self):
        text = "person: A\n# hidden: value\nbroken line\nremarks:\nnic-hdl: A1\n\n"
        records = parse_records(lines_of(text), "person", accept_all)
        assert records == [{"person": "A", "nic-hdl": "A1"}]

    def test_fields_allow_list(self, sample_text):
        records = parse_records(lines_of(sample_text), "person", accept_all, fields=["nic-hdl"])

        assert records == [
            {"person": "John Doe", "nic-hdl": "JD1-TEST"},
            {"person": "Jane Roe", "nic-hdl": "JR2-TEST"},
        ]

    def test_fields_allow_list_with_unknown_key(self, sample_text):
        records = parse_records(lines_of(sample_text), "route", accept_all, fields=["nothing"])
        assert records == [{"route": "192.0.2.0/24"}]

    def test_predicate_filters_records(self, sample_text):
        records = parse_records(
            lines_of(sample_text),
            "person",
            lambda r: r["nic-hdl"] == "JR2-TEST",
        )
        assert [r["person"] for r in records] == ["Jane Roe"]

    def test_predicate_false_consumes_whole_source(self, sample_text):
        consumed = []

        def tracking_lines():
            for line in lines_of(sample_text):
                consumed.append(line)
                yield line

        seen = []

        def reject(record):
            seen.append(record["person"])
            return False

        records = parse_records(tracking_lines(), "person", reject)

        assert records == []
        assert seen == ["John Doe", "Jane Roe"]
        assert len(consumed) == len(lines_of(sample_text))

    def test_sink_receives_records_instead_of_buffer(self, sample_text):
        received = []
        records = parse_records(lines_of(sample_text), "person", accept_all, sink=received.append)

        assert records == []
        assert [r["person"] for r in received] == ["John Doe", "Jane Roe"]

    def test_missing_predicate_raises_before_reading(self):
        def exploding_lines():
            raise AssertionError("lines must not be read")
            yield ""

        with pytest.raises(ConfigurationError):
            parse_records(exploding_lines(), "person", None)


class TestRecordFramer:
    """Tests for the framing state machine."""

    def test_state_transitions(self):
        emitted = []
        framer = RecordFramer("person", accept_all, emit=emitted.append)

        assert framer.state is FramerState.IDLE
        framer.feed("role: ignored")
        assert framer.state is FramerState.IDLE
        framer.feed("person: A")
        assert framer.state is FramerState.OPEN
        framer.feed("nic-hdl: A1")
        assert framer.state is FramerState.OPEN
        framer.feed("")
        assert framer.state is FramerState.IDLE
        assert emitted == [{"person": "A", "nic-hdl": "A1"}]

    def test_blank_line_while_idle_is_ignored(self):
        emitted = []
        framer = RecordFramer("person", accept_all, emit=emitted.append)
        framer.feed_many(["", "", ""])
        assert emitted == []

    def test_start_line_while_open_is_merged_as_attribute(self):
        # Records without a blank separator are folded into the open one
        emitted = []
        framer = RecordFramer("person", accept_all, emit=emitted.append)
        framer.feed_many(["person: A", "nic-hdl: A1", "person: B", "nic-hdl: B1", ""])

        assert emitted == [{"person": ["A", "B"], "nic-hdl": ["A1", "B1"]}]

    def test_other_type_start_line_while_open_is_merged(self):
        emitted = []
        framer = RecordFramer("person", accept_all, emit=emitted.append)
        framer.feed_many(["person: A", "role: R", ""])

        assert emitted == [{"person": "A", "role": "R"}]

    def test_start_line_while_open_respects_fields(self):
        emitted = []
        framer = RecordFramer("person", accept_all, emit=emitted.append, fields=["nic-hdl"])
        framer.feed_many(["person: A", "person: B", "nic-hdl: A1", ""])

        assert emitted == [{"person": "A", "nic-hdl": "A1"}]

    def test_finish_drops_open_record(self):
        emitted = []
        framer = RecordFramer("person", accept_all, emit=emitted.append)
        framer.feed_many(["person: A", "nic-hdl: A1"])
        framer.finish()

        assert emitted == []
        assert framer.state is FramerState.IDLE

    def test_counters(self, sample_text):
        framer = RecordFramer("person", lambda r: r["person"] == "Jane Roe", emit=lambda r: None)
        framer.feed_many(lines_of(sample_text))

        assert framer.records_seen == 2
        assert framer.records_emitted == 1

    def test_non_callable_predicate(self):
        with pytest.raises(ConfigurationError):
            RecordFramer("person", "yes", emit=lambda r: None)
