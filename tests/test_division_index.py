from cn_address_match.models import AdministrativeDivision
from cn_address_match.matcher.division_index import build_index


def test_division_derived_fields():
    division = AdministrativeDivision(code="1", province="北京市", city="北京市", district="海淀区", street="")
    assert division.full_address == "北京市北京市海淀区"
    assert division.levels == ("北京市", "北京市", "海淀区", "")
    assert division.level_count == 3


def test_exact_keyword_lookup(index):
    assert index.search_by_keyword("浙江省") >= {"33011", "33012", "33013"}
    assert "11001" in index.search_by_keyword("北京市北京市海淀区中关村街道")


def test_prefix_lookup(index):
    assert index.search_by_prefix("浙江") == {"33011", "33012", "33013"}
    assert index.search_by_prefix("北京市北京市海") == {"11001"}
    assert index.search_by_prefix("广东") == set()
    assert index.search_by_prefix("") == set()


def test_phonetic_lookup_finds_homophone(index):
    codes = index.search_by_phonetic("与杭区")
    assert {"33011", "33012"} <= codes


def test_search_by_keyword_empty(index):
    assert index.search_by_keyword("") == set()


def test_get_division(index):
    assert index.get_division("33011").street == "仓前街道"
    assert index.get_division("99999") is None
    assert len(index.get_all_divisions()) == 5
    assert len(index) == 5
    assert "31001" in index


def test_every_indexed_code_is_known(index):
    known = {d.code for d in index.get_all_divisions()}
    for term in index.terms():
        assert index.search_by_keyword(term) <= known


def test_build_index_is_idempotent(divisions):
    first = build_index(divisions)
    second = build_index(divisions)

    assert first.terms() == second.terms()
    for term in first.terms():
        assert first.search_by_keyword(term) == second.search_by_keyword(term)


def test_rebuild_does_not_touch_previous_index(divisions):
    old = build_index(divisions)
    new = build_index(divisions[:1])

    assert len(old) == 5
    assert len(new) == 1
    assert old.search_by_prefix("北京") == {"11001"}
    assert new.search_by_prefix("北京") == set()


def test_build_index_skips_blank_codes():
    index = build_index([
        AdministrativeDivision(code=" ", province="浙江省", city="杭州市", district="余杭区", street="仓前街道"),
        AdministrativeDivision(code="1", province="浙江省", city="杭州市", district="西湖区", street="蒋村街道"),
    ])
    assert len(index) == 1
    assert "余杭区" not in index.terms()


def test_duplicate_code_later_record_wins():
    index = build_index([
        AdministrativeDivision(code="1", province="浙江省", city="杭州市", district="余杭区", street="仓前街道"),
        AdministrativeDivision(code="1", province="浙江省", city="杭州市", district="西湖区", street="蒋村街道"),
    ])
    assert len(index) == 1
    assert index.get_division("1").district == "西湖区"
    assert "余杭区" not in index.terms()
