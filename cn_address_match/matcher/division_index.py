# cn_address_match/matcher/division_index.py

import logging
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Set, Tuple

from cn_address_match.models import AdministrativeDivision
from .phonetic import primary_reading

logger = logging.getLogger(__name__)


class _TrieNode:
    __slots__ = ("children", "codes")

    def __init__(self) -> None:
        self.children: Dict[str, "_TrieNode"] = {}
        self.codes: Set[str] = set()

    def insert(self, word: str, code: str) -> None:
        node = self
        for ch in word:
            node = node.children.setdefault(ch, _TrieNode())
            node.codes.add(code)

    def find(self, prefix: str) -> Optional["_TrieNode"]:
        node = self
        for ch in prefix:
            node = node.children.get(ch)
            if node is None:
                return None
        return node


class DivisionIndex:
    """
    行政区划索引（只读）：
    - divisions:   编码 -> 行政区划，唯一的数据来源
    - inverted:    关键词（各层级名称 + 完整地址） -> 编码集合
    - trie:        前缀树，每个节点累积所有经过它的关键词的编码
    - phonetic:    首选拼音 -> 原始关键词集合（仅当拼音与原文不同）

    索引只保存编码，不复制行政区划数据。
    实例由 build_index() 一次性构建完成，之后不再修改；
    重建时生成新实例再整体替换引用，读者无需加锁。
    """

    def __init__(
        self,
        divisions: Mapping[str, AdministrativeDivision],
        inverted: Mapping[str, FrozenSet[str]],
        trie: _TrieNode,
        phonetic: Mapping[str, FrozenSet[str]],
    ) -> None:
        self._divisions = MappingProxyType(dict(divisions))
        self._inverted = MappingProxyType(dict(inverted))
        self._trie = trie
        self._phonetic = MappingProxyType(dict(phonetic))

    def __len__(self) -> int:
        return len(self._divisions)

    def __contains__(self, code: object) -> bool:
        return code in self._divisions

    def search_by_keyword(self, keyword: str) -> Set[str]:
        if not keyword:
            return set()
        codes = set(self._inverted.get(keyword, ()))
        codes |= self.search_by_prefix(keyword)
        codes |= self.search_by_phonetic(keyword)
        return codes

    def search_by_prefix(self, prefix: str) -> Set[str]:
        if not prefix:
            return set()
        node = self._trie.find(prefix)
        if node is None:
            return set()
        # 节点上已累积了整棵子树的编码
        return set(node.codes)

    def search_by_phonetic(self, keyword: str) -> Set[str]:
        """
        拼音包含匹配：索引中任一关键词的拼音包含关键词拼音，或被其包含，
        都视为命中。这是故意放宽的判断，用来容忍部分读音重叠。
        """
        reading = primary_reading(keyword)
        if not reading:
            return set()

        matched_terms: Set[str] = set()
        for term_reading, terms in self._phonetic.items():
            if reading in term_reading or term_reading in reading:
                matched_terms |= terms

        codes: Set[str] = set()
        for term in matched_terms:
            codes |= self._inverted.get(term, frozenset())
        return codes

    def get_division(self, code: str) -> Optional[AdministrativeDivision]:
        return self._divisions.get(code)

    def get_all_divisions(self) -> Tuple[AdministrativeDivision, ...]:
        return tuple(self._divisions.values())

    def terms(self) -> FrozenSet[str]:
        return frozenset(self._inverted)


def build_index(divisions: Iterable[AdministrativeDivision]) -> DivisionIndex:
    """
    从完整的行政区划列表构建一份全新的索引。
    不做增量更新：每次调用都从空结构开始。
    """
    division_map: Dict[str, AdministrativeDivision] = {}
    inverted: Dict[str, Set[str]] = {}
    phonetic: Dict[str, Set[str]] = {}
    trie = _TrieNode()

    for division in divisions:
        if not division.code.strip():
            logger.warning("Skipping division without code: %r", division)
            continue
        if division.code in division_map:
            logger.warning(
                "Duplicate division code %s, later record wins", division.code
            )
        division_map[division.code] = division

    for code, division in division_map.items():
        for level in division.levels:
            if not level:
                continue
            inverted.setdefault(level, set()).add(code)
            trie.insert(level, code)

            reading = primary_reading(level)
            if reading != level:
                phonetic.setdefault(reading, set()).add(level)

        full_address = division.full_address
        if full_address:
            inverted.setdefault(full_address, set()).add(code)
            trie.insert(full_address, code)

    logger.info(
        "Built division index: %d divisions, %d terms, %d readings",
        len(division_map),
        len(inverted),
        len(phonetic),
    )

    return DivisionIndex(
        divisions=division_map,
        inverted={term: frozenset(codes) for term, codes in inverted.items()},
        trie=trie,
        phonetic={reading: frozenset(terms) for reading, terms in phonetic.items()},
    )
