import re


# 层级后缀，按优先级排列：同一层级里先命中的后缀生效
PROVINCE_KEYWORDS = ("省", "自治区", "特别行政区")
CITY_KEYWORDS = ("市", "州", "盟", "地区")
DISTRICT_KEYWORDS = ("区", "县", "旗", "自治县")
STREET_KEYWORDS = ("街道", "镇", "乡", "街道办")

LEVEL_KEYWORDS = (
    PROVINCE_KEYWORDS,
    CITY_KEYWORDS,
    DISTRICT_KEYWORDS,
    STREET_KEYWORDS,
)

PROVINCE_REGEX = re.compile("|".join(map(re.escape, PROVINCE_KEYWORDS)))
CITY_REGEX = re.compile("|".join(map(re.escape, CITY_KEYWORDS)))

# 用于异常检测的常见省级名称
COMMON_PROVINCE_NAMES = [
    "北京", "上海", "天津", "重庆",
    "河北", "山西", "辽宁", "吉林", "黑龙江",
    "江苏", "浙江", "安徽", "福建", "江西", "山东",
    "河南", "湖北", "湖南", "广东", "广西", "海南",
    "四川", "贵州", "云南", "西藏", "陕西", "甘肃",
    "青海", "宁夏", "新疆", "内蒙古",
]

# whitespace plus , ， . 。 、 ·
_NOISE_RE = re.compile(r"[\s,，.。、·]")


def clean_text(text: str) -> str:
    return _NOISE_RE.sub("", text)
