"""Time-versioned membership windows shared by unit groups and billing entities."""


def window_contains(start_seq: int, end_seq: int | None, seq: int) -> bool:
    """Whether period ``seq`` lies in the half-open window [start_seq, end_seq).

    ``end_seq`` of None means the membership is still open-ended.
    """
    if seq < start_seq:
        return False
    return end_seq is None or seq < end_seq


__all__ = ["window_contains"]
