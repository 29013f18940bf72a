"""
拼音归一化：用于同音错别字识别（如 "与杭" ↔ "余杭"）。

读音取自 pypinyin 的无声调形式，ü 写作 v（"绿" -> "lv"）。
多音字会展开成多种读音，因此 all_reading_combinations 的结果大小是
各字读音数的乘积。行政区划地址一般不超过 20 个字、多音字很少，
实际组合数通常在几十个以内；这里不设硬上限，以免静默丢掉匹配。
"""
import itertools
import re
from functools import lru_cache
from typing import FrozenSet, Optional

from pypinyin import Style, lazy_pinyin, pinyin

_HAN_RE = re.compile(r"[\u3400-\u4dbf\u4e00-\u9fff]")


@lru_cache(maxsize=8192)
def readings(char: str) -> FrozenSet[str]:
    """Every toneless reading of a CJK character; empty for anything else."""
    if len(char) != 1 or not _HAN_RE.match(char):
        return frozenset()
    return frozenset(pinyin(char, style=Style.NORMAL, heteronym=True)[0])


@lru_cache(maxsize=4096)
def all_reading_combinations(text: Optional[str]) -> FrozenSet[str]:
    if not text:
        return frozenset()
    per_char = [sorted(readings(c)) or [c] for c in text]
    return frozenset("".join(combo) for combo in itertools.product(*per_char))


def primary_reading(text: Optional[str]) -> str:
    """Single stable reading, used as the phonetic index key."""
    if not text:
        return ""
    return "".join(lazy_pinyin(text))


def is_homophone(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False
    if a == b:
        return True
    return not all_reading_combinations(a).isdisjoint(all_reading_combinations(b))
