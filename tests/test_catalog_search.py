from goods_issue.extensions import db
from goods_issue.models import Article, Issue, IssueLine
from goods_issue.services.catalog_search import CatalogSearchService
from goods_issue.services.transaction_state import NO_BRAND_LABEL


def _issue(code, quantity):
    issue = Issue(approver_id='A100', requester_id='R300')
    db.session.add(issue)
    db.session.flush()
    db.session.add(IssueLine(issue_id=issue.id, article_code=code, quantity=quantity, unit_price=0))
    db.session.commit()


def test_search_matches_name_case_insensitively(app_context):
    results = CatalogSearchService.search_catalog('hammer')

    assert [item.code for item in results] == ['TL-001']
    assert results[0].available_quantity == 6
    assert results[0].brand == 'Stanley'


def test_search_matches_code(app_context):
    results = CatalogSearchService.search_catalog('of-00')

    assert {item.code for item in results} == {'OF-001', 'OF-002'}


def test_search_excludes_items_without_stock(app_context):
    db.session.add(Article(code='ZZ-001', name='Hammer drill', unit='UND'))
    db.session.commit()
    _issue('TL-001', 6)

    assert CatalogSearchService.search_catalog('hammer') == []


def test_available_quantity_reflects_issued_lines(app_context):
    _issue('CL-001', 5)

    item = CatalogSearchService.get_item('CL-001')

    assert item.available_quantity == 10


def test_defaults_for_missing_unit_price_and_brand(app_context):
    article = db.session.get(Article, 'OF-002')
    article.unit = None
    article.unit_price = None
    db.session.commit()

    item = CatalogSearchService.get_item('OF-002')

    assert item.unit == 'UND'
    assert item.unit_price == 0.0
    assert item.brand == NO_BRAND_LABEL


def test_search_limit_is_capped_by_config(app):
    app.config['CATALOG_SEARCH_LIMIT'] = 2
    with app.app_context():
        assert len(CatalogSearchService.search_catalog(limit=500)) == 2
        assert len(CatalogSearchService.search_catalog()) == 2


def test_bulk_page_is_ordered_by_name_with_offset_paging(app_context):
    first = CatalogSearchService.load_catalog_page(1, per_page=4)
    second = CatalogSearchService.load_catalog_page(2, per_page=4)

    names = [item.name for item in first['items'] + second['items']]
    assert names == sorted(names)
    assert first['total'] == 6
    assert first['has_more'] is True
    assert second['has_more'] is False
    assert len(second['items']) == 2


def test_unknown_code_returns_none(app_context):
    assert CatalogSearchService.get_item('NOPE') is None
    assert CatalogSearchService.get_item('') is None
