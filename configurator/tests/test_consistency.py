"""Tests for catalog consistency checks."""

from configurator.engine import find_inconsistencies, resolve_defaults
from configurator.selection import SelectionState


class TestFindInconsistencies:
    def test_defaults_are_consistent(self, rig):
        assert find_inconsistencies(rig, resolve_defaults(rig)) == []

    def test_removed_option(self, desk):
        selection = SelectionState(chosen_dropdown_by_axis={10: 103})

        problems = find_inconsistencies(desk, selection)

        assert problems == ['Value 103 is not valid for "Finish"']

    def test_removed_axis(self, desk):
        assert find_inconsistencies(desk, SelectionState(chosen_image_by_axis={99: 1})) == [
            "Image axis 99 no longer exists"
        ]

    def test_axis_of_another_kind(self, rig):
        # Axis 41 is an image axis, not a dropdown
        selection = SelectionState(chosen_dropdown_by_axis={41: 411})

        assert len(find_inconsistencies(rig, selection)) == 1

    def test_model_option_without_model_axis(self, desk):
        assert len(find_inconsistencies(desk, SelectionState(chosen_model_option_id=1))) == 1

    def test_removed_optional_item(self, rig):
        selection = resolve_defaults(rig)
        selection.select_optional(50)  # required, not optional
        selection.select_optional(99)

        problems = find_inconsistencies(rig, selection)

        assert problems == [
            "Optional bundle item 50 no longer exists",
            "Optional bundle item 99 no longer exists",
        ]

    def test_removed_nested_option(self, rig):
        selection = resolve_defaults(rig)
        selection.bundle_item_configurations[50] = {60: 699, 61: 1}

        problems = find_inconsistencies(rig, selection)

        assert problems == [
            'Value 699 is not valid for "Seat Size" on "Seat"',
            'Axis 61 no longer exists on "Seat"',
        ]

    def test_unknown_ids_are_not_validation_errors(self, desk):
        from configurator.engine import validate

        selection = resolve_defaults(desk)
        selection.select_optional(99)

        assert validate(desk, selection) == []
        assert find_inconsistencies(desk, selection) != []
