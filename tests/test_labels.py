import pytest

from rasm.errors import AssemblyError
from rasm.labels import LabelMap


def test_added_label_resolves_to_its_address():
    labels = LabelMap()
    labels.add("_START", 42)
    labels.add("_LOOP", 0x0100)
    assert labels.address_of("_START") == 42
    assert labels.address_of("_LOOP") == 0x0100


def test_redefinition_raises_and_keeps_first_address():
    labels = LabelMap()
    labels.add("_START", 7)
    with pytest.raises(AssemblyError, match="Label redefined: _START"):
        labels.add("_START", 9)
    assert labels.address_of("_START") == 7
    assert len(labels) == 1


def test_undefined_label_raises():
    labels = LabelMap()
    labels.add("_A", 1)
    with pytest.raises(AssemblyError, match="Undefined label _B"):
        labels.address_of("_B")


def test_labels_are_case_sensitive():
    labels = LabelMap()
    labels.add("_A", 1)
    assert "_A" in labels
    assert "_a" not in labels


def test_length_and_iteration_follow_insertion():
    labels = LabelMap()
    names = ["_C", "_A", "_B"]
    for address, name in enumerate(names):
        labels.add(name, address)
    assert len(labels) == len(names)
    assert list(labels) == names


def test_addresses_are_kept_to_sixteen_bits():
    labels = LabelMap()
    labels.add("_HIGH", 0xFFFF)
    labels.add("_WRAP", 0x10000 + 5)
    assert labels.address_of("_HIGH") == 0xFFFF
    assert labels.address_of("_WRAP") == 5