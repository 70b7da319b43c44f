"""Tests for batch assembly."""

import pytest

from disperse_collect.core.batch import DistributionBatch, assemble_batch
from tests.conftest import A, B, C

UPPER_B = "0xB000000000000000000000000000000000000001"


def test_batch_is_sorted_by_address():
    batch = assemble_batch([(C, 3), (A, 1), (B, 2)])
    assert batch.addresses == (A, B, C)
    assert batch.amounts == (1, 2, 3)
    assert batch.total == 6


def test_transfers_zip_back_to_the_same_map():
    entries = {C: 3, A: 1, B: 2}
    batch = assemble_batch(entries.items())
    assert batch.transfers() == entries
    assert list(batch.transfers()) == [A, B, C]


def test_assembly_is_deterministic_across_input_orders():
    first = assemble_batch([(B, 2), (A, 1), (C, 3)])
    second = assemble_batch([(C, 3), (B, 2), (A, 1)])
    assert first == second
    assert list(first.transfers().items()) == list(second.transfers().items())


def test_sorting_is_by_address_bytes_not_string_case():
    lower_a = "0xa000000000000000000000000000000000000001"
    batch = assemble_batch([(UPPER_B, 1), (lower_a, 2)])
    assert batch.addresses == (lower_a, UPPER_B)


def test_length_mismatch_is_rejected():
    with pytest.raises(ValueError):
        DistributionBatch(addresses=(A, B), amounts=(1,))


def test_duplicate_addresses_are_rejected():
    with pytest.raises(ValueError):
        assemble_batch([(A, 1), (A, 2)])
