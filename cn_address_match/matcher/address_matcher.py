import logging
from typing import List, Optional, Set, Tuple

from cn_address_match.models import AdministrativeDivision, MatchResult
from .division_index import DivisionIndex
from .phonetic import is_homophone
from .rules import (
    CITY_REGEX,
    COMMON_PROVINCE_NAMES,
    LEVEL_KEYWORDS,
    PROVINCE_REGEX,
    clean_text,
)

logger = logging.getLogger(__name__)

InputLevels = Tuple[Optional[str], Optional[str], Optional[str], Optional[str]]

MULTIPLE_PROVINCES = "检测到多个省份 (multiple provinces detected)"
MULTIPLE_CITIES = "检测到多个城市 (multiple cities detected)"
MULTIPLE_PROVINCE_NAMES = "检测到多个省份名称 (multiple province names detected)"

# 评分权重
FULL_EXACT_SCORE = 50.0
FULL_CONTAINS_SCORE = 30.0
# 在上面两档之外新增的一档：整串同音（单字错别字）时加分
FULL_HOMOPHONE_SCORE = 25.0
LEVEL_EXACT_SCORE = 10.0
LEVEL_HOMOPHONE_SCORE = 8.0
LEVEL_CONTAINS_SCORE = 5.0
MISSING_PROVINCE_CITY_SCORE = 15.0
MISSING_CITY_DISTRICT_SCORE = 10.0
KEYWORD_SCORE = 2.0
MAX_SCORE = 100.0


def _detect_abnormal(address: str) -> Optional[str]:
    if len(PROVINCE_REGEX.findall(address)) > 1:
        return MULTIPLE_PROVINCES

    # 直辖市会同时占用省、市两级（"北京市"），所以允许两次
    if len(CITY_REGEX.findall(address)) > 2:
        return MULTIPLE_CITIES

    named = sum(
        1 for name in COMMON_PROVINCE_NAMES
        if (name + "省") in address or (name + "市") in address
    )
    if named > 1:
        return MULTIPLE_PROVINCE_NAMES

    return None


def _parse_levels(address: str) -> InputLevels:
    """
    从左到右依次切出 省 / 市 / 区县 / 街道。
    每一级按后缀优先级找第一个出现位置 > 0 的后缀（后缀本身不能单独成为一级），
    切出后在剩余部分继续找下一级；找不到的层级为 None。
    """
    rest = address
    parsed: List[Optional[str]] = []
    for keywords in LEVEL_KEYWORDS:
        level = None
        for keyword in keywords:
            pos = rest.find(keyword)
            if pos > 0:
                end = pos + len(keyword)
                level, rest = rest[:end], rest[end:]
                break
        parsed.append(level)
    return tuple(parsed)  # type: ignore[return-value]


def _extract_keywords(address: str, levels: InputLevels) -> List[str]:
    keywords = [address]
    keywords.extend(level for level in levels if level)

    # 缺少上一级时，单独拿下一级做关键词
    province, city, district, _ = levels
    if province is None and city is not None:
        keywords.append(city)
    if city is None and district is not None:
        keywords.append(district)

    return list(dict.fromkeys(keywords))


def _score(division: AdministrativeDivision,
           address: str,
           input_levels: InputLevels,
           keywords: List[str]) -> float:
    score = 0.0
    full_address = division.full_address
    levels = division.levels

    # 1. 完整地址
    if address == full_address:
        score += FULL_EXACT_SCORE
    elif address in full_address or full_address in address:
        score += FULL_CONTAINS_SCORE
    elif is_homophone(address, full_address):
        score += FULL_HOMOPHONE_SCORE

    # 2. 逐级比较
    for level, input_level in zip(levels, input_levels):
        if not level or not input_level:
            continue
        if level == input_level:
            score += LEVEL_EXACT_SCORE
        elif is_homophone(level, input_level):
            score += LEVEL_HOMOPHONE_SCORE
        elif level in input_level or input_level in level:
            score += LEVEL_CONTAINS_SCORE

    # 3. 缺少层级
    if input_levels[0] is None and levels[1] and levels[1] in address:
        score += MISSING_PROVINCE_CITY_SCORE
    if input_levels[1] is None and levels[2] and levels[2] in address:
        score += MISSING_CITY_DISTRICT_SCORE

    # 4. 关键词
    score += KEYWORD_SCORE * sum(1 for k in keywords if k in full_address)

    return max(0.0, min(MAX_SCORE, score))


class AddressMatcher:
    """Stateless matcher over a built DivisionIndex."""

    def __init__(self, index: DivisionIndex) -> None:
        self.index = index

    def match(self, raw_address: Optional[str]) -> Optional[MatchResult]:
        if raw_address is None or not raw_address.strip():
            return None

        # 1. 标准化
        address = clean_text(raw_address)
        if not address:
            return None

        # 2. 异常检测（只做标记，不影响匹配）
        abnormal_reason = _detect_abnormal(address)
        abnormal = abnormal_reason is not None

        # 3. 层级解析 + 关键词
        input_levels = _parse_levels(address)
        keywords = _extract_keywords(address, input_levels)

        # 4. 候选
        candidates = self._find_candidates(keywords)
        if not candidates:
            logger.debug("No candidates for %r", address)
            return MatchResult(
                code=None,
                division=None,
                score=0.0,
                abnormal=abnormal,
                abnormal_reason=abnormal_reason,
            )

        # 5. 评分：分数高者优先，同分取编码字典序最小者
        scored = []
        for code in candidates:
            division = self.index.get_division(code)
            scored.append((_score(division, address, input_levels, keywords), code, division))

        score, code, division = min(scored, key=lambda item: (-item[0], item[1]))
        logger.debug("Matched %r -> %s (%.1f)", address, code, score)

        return MatchResult(
            code=code,
            division=division,
            score=score,
            abnormal=abnormal,
            abnormal_reason=abnormal_reason,
        )

    def _find_candidates(self, keywords: List[str]) -> Set[str]:
        codes: Set[str] = set()
        for keyword in keywords:
            codes |= self.index.search_by_keyword(keyword)

        # 同音字全量扫描：索引只存了单层级的首选拼音，
        # 多音字组合需要在查询时逐一比较
        for division in self.index.get_all_divisions():
            if division.code in codes:
                continue
            for level in division.levels:
                if level and any(is_homophone(k, level) for k in keywords):
                    codes.add(division.code)
                    break
        return codes
