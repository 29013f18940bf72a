import pytest

from cn_address_match.models import AdministrativeDivision
from cn_address_match.matcher.address_matcher import AddressMatcher
from cn_address_match.matcher.division_index import build_index


@pytest.fixture
def divisions():
    return [
        AdministrativeDivision(code="33011", province="浙江省", city="杭州市", district="余杭区", street="仓前街道"),
        AdministrativeDivision(code="33012", province="浙江省", city="杭州市", district="余杭区", street="五常街道"),
        AdministrativeDivision(code="33013", province="浙江省", city="杭州市", district="西湖区", street="蒋村街道"),
        AdministrativeDivision(code="11001", province="北京市", city="北京市", district="海淀区", street="中关村街道"),
        AdministrativeDivision(code="31001", province="上海市", city="上海市", district="黄浦区", street="外滩街道"),
    ]


@pytest.fixture
def index(divisions):
    return build_index(divisions)


@pytest.fixture
def matcher(index):
    return AddressMatcher(index)
