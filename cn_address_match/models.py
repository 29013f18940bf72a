from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Tuple


class AdministrativeDivision(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str = Field(
        ...,
        description="Unique division code (e.g. 33011) / 行政区划编码",
    )
    province: str = Field(
        "",
        description="Province-level name (e.g. 浙江省, 北京市) / 省级行政区",
    )
    city: str = Field(
        "",
        description=(
            "Prefecture-level city; municipalities repeat the province "
            "(e.g. 杭州市, 北京市) / 地级市，直辖市与省级同名"
        ),
    )
    district: str = Field(
        "",
        description="District or county (e.g. 余杭区) / 区、县",
    )
    street: str = Field(
        "",
        description="Street office, town or township (e.g. 仓前街道) / 街道、镇、乡",
    )

    @property
    def levels(self) -> Tuple[str, str, str, str]:
        return (self.province, self.city, self.district, self.street)

    @property
    def full_address(self) -> str:
        return "".join(self.levels)

    @property
    def level_count(self) -> int:
        return sum(1 for level in self.levels if level)


class MatchRequest(BaseModel):
    address: str = Field(
        ...,
        max_length=64,
        description=(
            "Free-form administrative address, may be partial or contain typos / "
            "用户输入的行政区划地址，可缺省上级行政区或包含同音错别字"
        ),
    )


class MatchResult(BaseModel):
    code: Optional[str] = Field(
        None,
        description=(
            "Best matching division code, null when nothing matched / "
            "最佳匹配的行政区划编码，无候选时为空"
        ),
    )
    division: Optional[AdministrativeDivision] = Field(
        None,
        description="The matched reference division / 匹配到的行政区划",
    )
    score: float = Field(
        0.0,
        ge=0.0,
        le=100.0,
        description="Match score from 0-100 / 0~100 匹配度分数",
    )

    # 异常只是告警，最佳匹配仍然返回
    abnormal: bool = Field(
        False,
        description=(
            "True if the input names more than one division on the same level / "
            "True 表示输入中出现多个同级行政区划（例如两个省份）"
        ),
    )
    abnormal_reason: Optional[str] = Field(
        None,
        description="Why the input was flagged as abnormal / 异常原因",
    )


class ErrorResponse(BaseModel):
    error: str = Field(
        ...,
        description="Machine readable error code / 机器可读错误码",
    )
    message: str = Field(
        ...,
        description="Human readable error message / 人类可读错误说明",
    )
    request_id: Optional[str] = Field(
        None,
        description=(
            "Optional correlation identifier for tracing / 可选的调用追踪 ID"
        ),
    )
    details: Optional[dict] = Field(
        None,
        description="Optional structured error payload / 可选的结构化错误详情",
    )
