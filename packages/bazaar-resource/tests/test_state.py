"""Tests for ResourceState floors, cascades, history and undo."""
from __future__ import annotations

import json
import random

from bazaar_resource import (
    DEFAULT_RESOURCES,
    Change,
    ResourceDef,
    ResourceGraph,
    ResourceState,
)


def make_state(**kwargs) -> ResourceState:
    return ResourceState(ResourceGraph(DEFAULT_RESOURCES), **kwargs)


def assert_floors_hold(state: ResourceState) -> None:
    for name in state.graph.names():
        assert state.value(name) >= state.minimum(name), name


class TestInitialState:
    def test_values_start_at_floor(self) -> None:
        state = make_state()
        assert state.values == {
            "iron": 5,
            "coal": 10,
            "oil": 5,
            "steel": 15,
            "plastics": 15,
            "consumer_goods": 30,
        }

    def test_histories_have_one_sample(self) -> None:
        state = make_state()
        for name in state.graph.names():
            assert state.history(name) == [state.value(name)]
        assert state.can_undo is False

    def test_compute_min_for_base_and_derived(self) -> None:
        state = make_state()
        assert state.compute_min("iron") == 5
        assert state.compute_min("steel", {"iron": 7, "coal": 1}) == 8
        # Missing components count as zero.
        assert state.compute_min("steel", {"iron": 7}) == 7


class TestSetValue:
    def test_absolute_value(self) -> None:
        state = make_state()
        group = state.set_value("consumer_goods", 40)
        assert state.value("consumer_goods") == 40
        assert group == [Change("consumer_goods", 30, 40)]
        assert state.history("consumer_goods") == [30, 40]

    def test_updater_receives_previous(self) -> None:
        state = make_state()
        state.set_value("oil", lambda prev: prev + 1)
        assert state.value("oil") == 6

    def test_numeric_string_is_parsed(self) -> None:
        state = make_state()
        state.set_value("iron", " 12 ")
        assert state.value("iron") == 12

    def test_clamps_up_to_floor(self) -> None:
        state = make_state()
        state.set_value("steel", 3)
        assert state.value("steel") == 15
        assert state.action_log[-1] == [Change("steel", 15, 15)]

    def test_invalid_input_is_ignored(self) -> None:
        state = make_state()
        before = state.snapshot()
        for bad in ("abc", "", float("nan"), float("inf"), None, True, [1]):
            assert state.set_value("iron", bad) == []
        assert state.set_value("gold", 10) == []
        assert state.snapshot() == before


class TestCascade:
    def test_raising_component_lifts_dependents(self) -> None:
        state = make_state()
        group = state.set_value("iron", 20)

        assert state.value("steel") == 30
        assert state.value("consumer_goods") == 45
        assert group[0] == Change("iron", 5, 20)
        assert Change("steel", 15, 30, cascading=True) in group
        assert Change("consumer_goods", 30, 45, cascading=True) in group
        assert len(state.action_log) == 1

    def test_shared_component_lifts_both_branches(self) -> None:
        state = make_state()
        state.set_value("coal", 20)
        assert state.value("steel") == 25
        assert state.value("plastics") == 25
        assert state.value("consumer_goods") == 50
        assert_floors_hold(state)

    def test_dependent_already_above_floor_is_untouched(self) -> None:
        state = make_state()
        state.set_value("steel", 100)
        group = state.set_value("iron", 10)
        assert state.value("steel") == 100
        assert [c.name for c in group] == ["iron"]

    def test_decrease_does_not_cascade(self) -> None:
        state = make_state()
        state.set_value("iron", 20)
        group = state.set_value("iron", 6)
        assert group == [Change("iron", 20, 6)]
        assert state.value("steel") == 30

    def test_deep_diamond_keeps_floors(self) -> None:
        graph = ResourceGraph([
            ResourceDef(name="a", base_min=1),
            ResourceDef(name="b", components=("a",)),
            ResourceDef(name="c", components=("b",)),
            ResourceDef(name="d", components=("a", "c")),
            ResourceDef(name="e", components=("d", "b")),
        ])
        state = ResourceState(graph)
        state.set_value("a", 50)
        assert_floors_hold(state)

    def test_floor_invariant_under_random_edits(self) -> None:
        state = make_state()
        rng = random.Random(1234)
        names = state.graph.names()
        for _ in range(300):
            state.set_value(rng.choice(names), rng.randint(-20, 120))
            assert_floors_hold(state)


class TestAssign:
    def test_skips_clamp_and_log(self) -> None:
        state = make_state()
        changes = state.assign("steel", 3)
        assert changes == [Change("steel", 15, 3)]
        assert state.value("steel") == 3
        assert state.history("steel") == [15, 3]
        assert not state.can_undo

    def test_raise_still_lifts_dependents(self) -> None:
        state = make_state()
        state.assign("iron", 20)
        assert state.values["steel"] == 30
        assert state.values["consumer_goods"] == 45
        assert_floors_hold(state)
        assert not state.can_undo

    def test_invalid_input_is_ignored(self) -> None:
        state = make_state()
        assert state.assign("iron", "heavy") == []
        assert state.assign("gold", 3) == []
        assert state.value("iron") == 5


class TestUndo:
    def test_round_trip_with_cascade(self) -> None:
        state = make_state()
        state.set_value("oil", 8)
        values = state.values
        histories = state.histories
        log_len = len(state.action_log)

        state.set_value("coal", 40)
        state.undo()

        assert state.values == values
        assert state.histories == histories
        assert len(state.action_log) == log_len

    def test_round_trip_keeps_equal_earlier_samples(self) -> None:
        state = make_state()
        state.set_value("oil", 9)
        state.set_value("oil", 7)
        state.set_value("oil", 9)
        state.undo()
        assert state.history("oil") == [5, 9, 7]
        assert state.value("oil") == 7

    def test_undo_on_empty_log_is_noop(self) -> None:
        state = make_state()
        before = state.snapshot()
        state.undo()
        assert state.snapshot() == before

    def test_undo_walks_back_through_groups(self) -> None:
        state = make_state()
        state.set_value("iron", 10)
        state.set_value("iron", 20)
        state.undo()
        state.undo()
        assert state.values == make_state().values
        assert state.can_undo is False


class TestIgnoreMinimum:
    def test_floors_not_applied(self) -> None:
        state = make_state(ignore_minimum=True)
        state.set_value("steel", 3)
        assert state.value("steel") == 3

    def test_no_cascade_while_ignoring(self) -> None:
        state = make_state(ignore_minimum=True)
        group = state.set_value("iron", 50)
        assert len(group) == 1
        assert state.value("steel") == 15

    def test_switching_back_reasserts_floors(self) -> None:
        state = make_state()
        state.toggle_ignore_minimum()
        state.set_value("iron", 1)
        state.set_value("steel", 3)
        log_len = len(state.action_log)

        state.toggle_ignore_minimum()

        assert state.ignore_minimum is False
        assert state.value("iron") == 5
        assert state.value("steel") == 15
        new_groups = state.action_log[log_len:]
        assert new_groups == [
            [Change("iron", 1, 5)],
            [Change("steel", 3, 15)],
        ]

    def test_enabling_ignore_changes_nothing(self) -> None:
        state = make_state()
        state.set_ignore_minimum(True)
        assert state.can_undo is False


class TestReset:
    def test_reset_restores_fresh_snapshot(self) -> None:
        state = make_state()
        state.set_value("iron", 30)
        state.set_value("oil", 11)
        state.reset()

        fresh = make_state()
        assert state.values == fresh.values
        for name in state.graph.names():
            assert len(state.history(name)) == 1
        assert state.action_log == []


class TestSnapshot:
    def test_json_round_trip(self) -> None:
        state = make_state()
        state.set_value("iron", 20)
        state.set_value("oil", 9)
        data = json.loads(json.dumps(state.snapshot()))

        restored = make_state()
        restored.restore(data)
        assert restored.values == state.values
        assert restored.histories == state.histories
        assert restored.action_log == state.action_log

    def test_malformed_entries_fall_back(self) -> None:
        state = make_state()
        state.restore({
            "values": {"iron": "lots", "coal": 12, "unknown": 3},
            "histories": {"coal": "bad"},
            "log": [[{"name": "gold", "previous": 1, "next": 2}], "junk"],
        })
        assert state.value("iron") == 5
        assert state.value("coal") == 12
        assert state.history("coal") == [12]
        # coal's consumers came back at fresh values and were lifted to the new floors
        assert state.value("steel") == 17
        assert state.value("plastics") == 17
        assert state.value("consumer_goods") == 34
        assert state.action_log == [
            [Change("steel", 15, 17)],
            [Change("plastics", 15, 17)],
            [Change("consumer_goods", 30, 34)],
        ]

    def test_non_dict_payload_pieces_are_ignored(self) -> None:
        state = make_state()
        state.restore({"values": [], "histories": None, "log": {}})
        assert state.values == make_state().values

    def test_ignore_flag_must_be_a_real_bool(self) -> None:
        state = make_state()
        state.restore({"ignore_minimum": "false"})
        assert state.ignore_minimum is False
        state.restore({"ignore_minimum": True})
        assert state.ignore_minimum is True

    def test_complete_snapshot_keeps_values_below_floor(self) -> None:
        state = make_state()
        state.assign("consumer_goods", 25)
        restored = make_state()
        restored.restore(json.loads(json.dumps(state.snapshot())))
        assert restored.value("consumer_goods") == 25
        assert not restored.can_undo
