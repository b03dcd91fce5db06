"""Unit tests for label parsing."""

from __future__ import annotations

import pytest

from github_forker.github_labels import DEFAULT_LABEL_COLOR, LabelSpec, label_names


def test_label_from_api_payload() -> None:
    label = LabelSpec.from_api({"name": "bug", "color": "ff0000", "description": "Broken"})

    assert label == LabelSpec(name="bug", color="ff0000", description="Broken")
    assert label.to_payload() == {"name": "bug", "color": "ff0000", "description": "Broken"}


def test_label_missing_color_and_description_fall_back() -> None:
    label = LabelSpec.from_api({"name": "help wanted", "color": None, "description": None})

    assert label.color == DEFAULT_LABEL_COLOR
    assert label.description == ""


@pytest.mark.parametrize("payload", [None, [], "bug", {"color": "ff0000"}, {"name": "  "}])
def test_label_rejects_malformed_payload(payload: object) -> None:
    with pytest.raises(ValueError):
        LabelSpec.from_api(payload)


def test_label_names_keep_order_and_commas() -> None:
    labels = [
        {"name": "bug"},
        {"name": "needs triage, urgent"},
        {"name": "bug"},
        {"color": "ffffff"},
    ]

    assert label_names(labels) == ("bug", "needs triage, urgent", "bug")


def test_label_names_of_missing_labels() -> None:
    assert label_names(None) == ()
