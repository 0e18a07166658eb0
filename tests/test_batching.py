# tests/test_batching.py
import pytest

from stockforum.domain.batching import apply_daily_cap, normalize_symbols, partition_into_batches

# -------------------------------
# partition_into_batches
# -------------------------------

def test_partition_basic():
    assert partition_into_batches(["X", "Y", "Z"], 2) == [["X", "Y"], ["Z"]]

def test_partition_empty():
    assert partition_into_batches([], 8) == []

def test_partition_batch_larger_than_symbols():
    assert partition_into_batches(["A", "B"], 8) == [["A", "B"]]

def test_partition_sp500_sized_list():
    # 503 symbols, 8 per minute → 63 batches, last one of 7
    symbols = [f"S{i}" for i in range(503)]
    batches = partition_into_batches(symbols, 8)
    assert len(batches) == 63
    assert all(len(b) == 8 for b in batches[:-1])
    assert len(batches[-1]) == 7
    # order kept, nothing lost
    assert [s for b in batches for s in b] == symbols

def test_partition_rejects_zero():
    with pytest.raises(ValueError):
        partition_into_batches(["A"], 0)

# -------------------------------
# normalize_symbols / apply_daily_cap
# -------------------------------

def test_normalize_dedupes_and_uppercases():
    assert normalize_symbols([" aapl", "MSFT", "AAPL", "", None, "brk.b"]) == ["AAPL", "MSFT", "BRK.B"]

def test_daily_cap_splits_overflow():
    todo, dropped = apply_daily_cap(["A", "B", "C"], 2)
    assert todo == ["A", "B"]
    assert dropped == ["C"]

def test_daily_cap_disabled():
    todo, dropped = apply_daily_cap(["A", "B", "C"], None)
    assert todo == ["A", "B", "C"]
    assert dropped == []
