"""睡眠記録の集計（平均・合計・最頻の質）."""

from collections.abc import Sequence

import numpy as np

from sleeplog.interfaces.record_store import Quality, SleepRecord


def total_hours(records: Sequence[SleepRecord]) -> float:
    """hours_slept の合計. 空なら 0.0."""
    if not records:
        return 0.0
    return float(np.sum([r.hours_slept for r in records]))


def average_hours(records: Sequence[SleepRecord]) -> float:
    """hours_slept の算術平均.

    Raises:
        ValueError: records が空の場合
    """
    if not records:
        raise ValueError("average of empty sequence")
    return float(np.mean([r.hours_slept for r in records]))


def dominant_quality(records: Sequence[SleepRecord]) -> Quality:
    """最も多い quality を返す.

    候補を Quality の宣言順に走査し、最初に見つかった最大値を採用する。
    よって同数なら good → average → poor の順で優先される。

    Raises:
        ValueError: records が空の場合
    """
    if not records:
        raise ValueError("dominant quality of empty sequence")
    candidates = list(Quality)
    counts = np.zeros(len(candidates), dtype=int)
    for record in records:
        counts[candidates.index(record.quality)] += 1
    # np.argmax は最大値が複数あるとき最初の添字を返す
    return candidates[int(np.argmax(counts))]
