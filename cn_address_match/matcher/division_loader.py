import logging
import os
import threading
from functools import lru_cache
from typing import Iterable, List, Optional

from cn_address_match.models import AdministrativeDivision, MatchResult
from .address_matcher import AddressMatcher
from .division_index import DivisionIndex, build_index

logger = logging.getLogger(__name__)

_DEFAULT_DATA_PATH = os.path.abspath(
    os.path.join(
        os.path.dirname(__file__), "..", "data", "administrative_divisions.csv"
    )
)

_FIELD_COUNT = 5


class DivisionDataError(RuntimeError):
    pass


def data_path() -> str:
    # export DIVISIONS_CSV_PATH=/srv/data/divisions.csv
    return os.getenv("DIVISIONS_CSV_PATH") or _DEFAULT_DATA_PATH


def parse_division_line(line: str) -> Optional[AdministrativeDivision]:
    """
    一行数据：编码,省,市,区,街道
    空行和 # 开头的注释行跳过；去掉末尾空字段后不足 5 个的行记录告警后丢弃。
    中间层级可以为空（如 "11000,北京市,,海淀区,中关村街道"）。
    """
    line = line.strip()
    if not line or line.startswith("#"):
        return None

    # 末尾的空字段不算字段
    parts = line.rstrip(",").split(",")
    if len(parts) < _FIELD_COUNT:
        logger.warning("Malformed division line (expected %d fields): %s",
                       _FIELD_COUNT, line)
        return None

    code, province, city, district, street = (p.strip() for p in parts[:_FIELD_COUNT])
    return AdministrativeDivision(
        code=code,
        province=province,
        city=city,
        district=district,
        street=street,
    )


def parse_division_lines(lines: Iterable[str]) -> List[AdministrativeDivision]:
    divisions = []
    for line in lines:
        division = parse_division_line(line)
        if division is not None:
            divisions.append(division)
    return divisions


def load_divisions(path: Optional[str] = None) -> List[AdministrativeDivision]:
    path = path or data_path()
    try:
        with open(path, "r", encoding="utf-8") as f:
            divisions = parse_division_lines(f)
    except OSError as exc:
        raise DivisionDataError(f"Failed to load divisions from {path}: {exc}") from exc

    logger.info("Loaded %d administrative divisions from %s", len(divisions), path)
    return divisions


class AddressMatchingService:
    """
    持有当前发布的索引。重建时先构建新索引，再一次性替换引用，
    正在进行的 match 继续使用旧索引，不会读到半成品。
    """

    def __init__(self, divisions: Iterable[AdministrativeDivision] = ()) -> None:
        self._rebuild_lock = threading.Lock()
        self._matcher = AddressMatcher(build_index(divisions))

    @property
    def index(self) -> DivisionIndex:
        return self._matcher.index

    def build_index(self, divisions: Iterable[AdministrativeDivision]) -> DivisionIndex:
        with self._rebuild_lock:
            index = build_index(divisions)
            self._matcher = AddressMatcher(index)
        return index

    def reload(self, path: Optional[str] = None) -> DivisionIndex:
        return self.build_index(load_divisions(path))

    def match_address(self, address: Optional[str]) -> Optional[MatchResult]:
        return self._matcher.match(address)


@lru_cache()
def get_service() -> AddressMatchingService:
    return AddressMatchingService(load_divisions())
