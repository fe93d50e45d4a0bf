"""Tests for result aggregation and namespace grouping."""

from batchcall.aggregator import aggregate, group_by_namespace
from batchcall.models import AddressState, RawCallResult

from conftest import OTHER_TOKEN, OTHER_USER, TOKEN, USER, balance_of_input


def _balance(owner, value):
    return RawCallResult(method="balanceOf", value=value, input=balance_of_input(owner), args=[owner])


class TestAggregate:
    """Test cases for aggregate."""

    def test_missing_methods_are_dropped(self):
        states = [AddressState(TOKEN, "default", [None, RawCallResult("symbol", "TOK")])]

        records = aggregate(states)

        assert records == [{"address": TOKEN, "namespace": "default", "symbol": [{"value": "TOK"}]}]

    def test_address_with_only_missing_methods_has_no_record(self):
        assert aggregate([AddressState(TOKEN, "default", [None, None])]) == []

    def test_distinct_inputs_accumulate(self):
        states = [AddressState(TOKEN, "default", [_balance(USER, "100"), _balance(OTHER_USER, "250")])]

        record = aggregate(states)[0]

        assert record["balanceOf"] == [
            {"value": "100", "input": balance_of_input(USER), "args": [USER]},
            {"value": "250", "input": balance_of_input(OTHER_USER), "args": [OTHER_USER]},
        ]

    def test_duplicate_input_keeps_first(self):
        states = [AddressState(TOKEN, "default", [_balance(USER, "100"), _balance(USER, "999")])]

        record = aggregate(states)[0]

        assert record["balanceOf"] == [{"value": "100", "input": balance_of_input(USER), "args": [USER]}]

    def test_zero_argument_repeat_replaces(self):
        states = [
            AddressState(TOKEN, "default", [RawCallResult("symbol", "OLD")]),
            AddressState(TOKEN, "default", [RawCallResult("symbol", "NEW")]),
        ]

        records = aggregate(states)

        assert len(records) == 1
        assert records[0]["symbol"] == [{"value": "NEW"}]

    def test_new_method_on_existing_record(self):
        states = [
            AddressState(
                TOKEN,
                "tokens",
                [RawCallResult("symbol", "TOK"), _balance(USER, "100"), RawCallResult("decimals", "18")],
            )
        ]

        record = aggregate(states)[0]

        assert record["symbol"] == [{"value": "TOK"}]
        assert record["balanceOf"] == [{"value": "100", "input": balance_of_input(USER), "args": [USER]}]
        assert record["decimals"] == [{"value": "18"}]

    def test_address_case_folds_into_one_record(self):
        mixed = TOKEN.upper().replace("0X", "0x")
        states = [
            AddressState(TOKEN, "default", [RawCallResult("symbol", "TOK")]),
            AddressState(mixed, "default", [RawCallResult("decimals", "18"), RawCallResult("symbol", "NEW")]),
        ]

        records = aggregate(states)

        assert len(records) == 1
        assert records[0]["address"] == TOKEN
        assert records[0]["decimals"] == [{"value": "18"}]
        assert records[0]["symbol"] == [{"value": "NEW"}]

    def test_records_follow_first_seen_order(self):
        states = [
            AddressState(OTHER_TOKEN, "default", [RawCallResult("symbol", "B")]),
            AddressState(TOKEN, "default", [RawCallResult("symbol", "A")]),
        ]

        assert [record["address"] for record in aggregate(states)] == [OTHER_TOKEN, TOKEN]


class TestGroupByNamespace:
    """Test cases for group_by_namespace."""

    def test_partitions_and_strips_namespace(self):
        records = [
            {"address": TOKEN, "namespace": "tokens", "symbol": [{"value": "A"}]},
            {"address": OTHER_TOKEN, "namespace": "default", "symbol": [{"value": "B"}]},
        ]

        grouped = group_by_namespace(records)

        assert list(grouped) == ["tokens", "default"]
        assert grouped["tokens"] == [{"address": TOKEN, "symbol": [{"value": "A"}]}]
        assert all("namespace" not in record for group in grouped.values() for record in group)
        # Inputs are left untouched.
        assert records[0]["namespace"] == "tokens"
