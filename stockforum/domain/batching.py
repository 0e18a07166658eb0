# stockforum/domain/batching.py

from typing import List, Optional, Sequence, Tuple


def partition_into_batches(symbols: Sequence[str], batch_size: int) -> List[List[str]]:
    """
    Split symbols into consecutive batches of batch_size, keeping order.
    Only the last batch may be smaller.

    >>> partition_into_batches(["X", "Y", "Z"], 2)
    [['X', 'Y'], ['Z']]
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    return [list(symbols[i: i + batch_size]) for i in range(0, len(symbols), batch_size)]


def normalize_symbols(symbols: Sequence[str]) -> List[str]:
    """Upper-case, strip and de-duplicate symbols, keeping first-seen order."""
    seen = set()
    out = []
    for s in symbols:
        sym = (s or "").strip().upper()
        if sym and sym not in seen:
            seen.add(sym)
            out.append(sym)
    return out


def apply_daily_cap(symbols: Sequence[str], requests_per_day: Optional[int]) -> Tuple[List[str], List[str]]:
    """Return (symbols to fetch today, symbols left over)."""
    if not requests_per_day or len(symbols) <= requests_per_day:
        return list(symbols), []
    return list(symbols[:requests_per_day]), list(symbols[requests_per_day:])
