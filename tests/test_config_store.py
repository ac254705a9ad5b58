import copy

import pytest

from playerhub.config_store import (
    ConfigStore,
    default_document,
    is_valid_hex_color,
    normalize_collections,
    normalize_config,
    slugify_collection_id,
)
from playerhub.constants import FEATURE_FLAGS, KNOWN_ACTIVITIES

MESSY_INPUT = {
    "branding": {"appName": "   Quiz   Night  ", "tagline": "x" * 300, "accent": " #aBc123 "},
    "preferences": {
        "enableFeedbackHub": "false",
        "enableAIGenerator": 0,
        "enableLoadSession": "maybe",
        "enabledActivities": {"trivia": False, "laserTag": True, "charades": "no"},
    },
    "collections": [
        {"name": "Friday Fun!", "activities": {"trivia": ["  Q1  ", "", 3, {"q": "Q2"}], "laserTag": ["x"]}},
        {"id": "friday-fun", "name": "Duplicate", "activities": {"riddles": ["r"]}},
        {"name": "No activities", "activities": {"laserTag": ["x"]}},
        {"name": "!!!", "activities": {"icebreakers": ["hi"]}},
        "not-a-collection",
    ],
}


def test_defaults_enable_everything():
    doc = default_document()
    assert all(doc["preferences"][flag] is True for flag in FEATURE_FLAGS)
    assert set(doc["preferences"]["enabledActivities"]) == set(KNOWN_ACTIVITIES)
    assert doc["collections"] == []


@pytest.mark.parametrize("value", ["#00FF00", "#abcdef", " #123456 "])
def test_valid_hex_colors(value):
    assert is_valid_hex_color(value)


@pytest.mark.parametrize("value", ["not-a-color", "#12345", "00FF00", "#GGGGGG", None, ""])
def test_invalid_hex_colors(value):
    assert not is_valid_hex_color(value)


def test_invalid_accent_keeps_previous_value():
    store = ConfigStore()
    store.update({"branding": {"accent": "#00FF00"}})
    store.update({"branding": {"accent": "not-a-color"}})
    assert store.document["branding"]["accent"] == "#00FF00"


def test_normalization_is_idempotent():
    once = normalize_config(copy.deepcopy(MESSY_INPUT))
    twice = normalize_config(copy.deepcopy(once))
    assert once == twice


def test_normalization_shapes_messy_input():
    doc = normalize_config(copy.deepcopy(MESSY_INPUT))

    assert doc["branding"]["appName"] == "Quiz   Night"
    assert len(doc["branding"]["tagline"]) == 140
    assert doc["branding"]["accent"] == "#aBc123"

    prefs = doc["preferences"]
    assert prefs["enableFeedbackHub"] is False
    assert prefs["enableAIGenerator"] is False
    assert prefs["enableLoadSession"] is True  # unparseable -> previous value
    assert "laserTag" not in prefs["enabledActivities"]
    assert prefs["enabledActivities"]["trivia"] is False
    assert prefs["enabledActivities"]["charades"] is False
    assert prefs["enabledActivities"]["riddles"] is True

    ids = [c["id"] for c in doc["collections"]]
    assert ids[0] == "friday-fun"
    assert len(ids) == 2
    assert ids[1].startswith("collection-")
    assert doc["collections"][0]["activities"] == {"trivia": ["Q1", "3", {"q": "Q2"}]}


def test_collection_ids_derive_from_supplied_id_first():
    collections = normalize_collections(
        [{"id": "My ID", "name": "Other", "activities": {"trivia": ["q"]}}]
    )
    assert collections[0]["id"] == "my-id"


def test_slugify_collapses_separators():
    assert slugify_collection_id("  Team -- Building 2024! ") == "team-building-2024"
    assert slugify_collection_id("***") == ""


def test_update_merges_sections_instead_of_replacing():
    changes = []
    store = ConfigStore(on_change=lambda: changes.append(1))
    store.update({"branding": {"appName": "Hub"}, "collections": [{"name": "A", "activities": {"trivia": ["q"]}}]})
    store.update({"preferences": {"enableActivityQueue": False}})

    doc = store.document
    assert doc["branding"]["appName"] == "Hub"
    assert doc["branding"]["tagline"] == default_document()["branding"]["tagline"]
    assert doc["preferences"]["enableActivityQueue"] is False
    assert [c["id"] for c in doc["collections"]] == ["a"]
    assert len(changes) == 2


def test_empty_strings_keep_previous_branding():
    store = ConfigStore()
    store.update({"branding": {"appName": "Hub", "tagline": "Tag"}})
    store.update({"branding": {"appName": "   ", "tagline": ""}})
    assert store.document["branding"]["appName"] == "Hub"
    assert store.document["branding"]["tagline"] == "Tag"


def test_load_reads_persisted_layout_without_notifying():
    changes = []
    store = ConfigStore(on_change=lambda: changes.append(1))
    store.load(
        {
            "feedback": [],
            "config": {"branding": {"accent": "#111111"}, "preferences": {"enableFeedbackHub": False}},
            "collections": [{"name": "Set", "activities": {"riddles": ["r"]}}],
        }
    )
    assert store.document["branding"]["accent"] == "#111111"
    assert store.document["preferences"]["enableFeedbackHub"] is False
    assert store.snapshot()["collections"][0]["id"] == "set"
    assert changes == []


def test_snapshot_layout():
    snap = ConfigStore().snapshot()
    assert set(snap) == {"config", "collections"}
    assert set(snap["config"]) == {"branding", "preferences"}
