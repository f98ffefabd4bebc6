"""Tests for the database backed label store."""

import pytest

from fmg_labels.core.labels import BurgLabel, CustomLabel, StateLabel, is_state_label
from fmg_labels.core.state_labels import StateLabelsGenerator
from fmg_labels.db import Database, SqlLabelStore


def state_label(state_id, name="Rus"):
    return StateLabel(
        id=f"stateLabel{state_id}",
        name=name,
        state_id=state_id,
        points=((0, 0), (10, 0), (20, 0)),
    )


@pytest.fixture
def database():
    database = Database()
    database.initialize("sqlite://")
    return database


@pytest.fixture
def store(database):
    store = SqlLabelStore(database, "map-1")
    store.insert(state_label(1))
    store.insert(state_label(2, "Avaria"))
    store.insert(BurgLabel(id="burgLabel7", name="Ashford", burg_id=7, x=5, y=6))
    return store


class TestSqlLabelStore:
    """Test store operations against SQLite."""

    def test_labels_round_trip(self, store):
        """Test labels read back from the database."""
        assert len(store) == 3
        assert [label.id for label in store.all()] == ["stateLabel1", "stateLabel2", "burgLabel7"]
        assert store.get("burgLabel7") == BurgLabel(
            id="burgLabel7", name="Ashford", burg_id=7, x=5, y=6
        )
        assert store.get_state_label(2).name == "Avaria"
        assert [label.id for label in store.get_by_type("burg")] == ["burgLabel7"]
        assert "stateLabel1" in store

    def test_maps_are_isolated(self, database, store):
        """Test labels of different maps are separate."""
        other = SqlLabelStore(database, "map-2")
        assert len(other) == 0
        other.insert(state_label(1, "Other"))
        assert store.get_state_label(1).name == "Rus"

    def test_insert_rejects_duplicate_ids(self, store):
        """Test inserting an existing id fails."""
        with pytest.raises(ValueError):
            store.insert(state_label(1))
        assert len(store) == 3

    def test_remove(self, store):
        """Test removing labels by id and type."""
        assert store.remove("burgLabel7")
        assert not store.remove("burgLabel7")
        assert store.remove_by_type("state") == 2
        assert len(store) == 0

    def test_replace(self, store):
        """Test a batch replace."""
        removed = store.replace(
            lambda label: is_state_label(label, [2]), [state_label(2, "Avar"), state_label(3)]
        )
        assert removed == 1
        assert store.get_state_label(2).name == "Avar"
        assert len(store) == 4

    def test_failed_replace_is_rolled_back(self, store):
        """Test a rejected batch is rolled back."""
        with pytest.raises(ValueError):
            store.replace(lambda label: is_state_label(label, [2]), [state_label(1)])
        assert store.get_state_label(2).name == "Avaria"
        assert len(store) == 3

    def test_clear(self, store):
        """Test clearing the labels of a map."""
        store.clear()
        assert store.all() == []


def test_generator_regenerates_stored_labels(database, two_states_map, measurer):
    """Test regeneration against the database store."""
    store = SqlLabelStore(database, "map-1")
    store.insert(CustomLabel(id="label1", name="Here be dragons", points=((0, 0), (50, 0))))
    generator = StateLabelsGenerator(two_states_map, measurer)

    generator.regenerate(store)
    report = generator.regenerate(store, [1])

    assert report.removed == 1
    assert sorted(label.id for label in store.all()) == ["label1", "stateLabel1", "stateLabel2"]
