from goods_issue.extensions import cache, db
from goods_issue.models import Article, Issue, IssueAsset, IssueLine, IssueRequest
from goods_issue.utils.error_messages import ErrorMessages as EM
from goods_issue.utils.error_messages import WarningMessages as WM


def _select(client, slug, row, code, quantity=None):
    response = client.put(f'/api/issues/{slug}/rows/{row}/item', json={'code': code})
    assert response.status_code == 200, response.get_json()
    if quantity is not None:
        response = client.patch(f'/api/issues/{slug}/rows/{row}', json={'field': 'quantity', 'value': quantity})
        assert response.status_code == 200
    return response


def _header(client, slug, **fields):
    response = client.patch(f'/api/issues/{slug}/header', json=fields)
    assert response.status_code == 200
    return response.get_json()['data']['header']


def test_issue_api_requires_login(client):
    response = client.get('/api/issues/')

    assert response.status_code == 401
    assert response.get_json()['message'] == EM.AUTH_REQUIRED


def test_invalid_credentials_are_rejected(client):
    response = client.post('/auth/login', json={'email': 'ana.rojas@example.com', 'password': 'wrong'})

    assert response.status_code == 401


def test_forms_index_lists_every_variant(auth_client):
    slugs = {form['slug'] for form in auth_client.get('/api/issues/').get_json()['data']}

    assert {'office-supplies', 'tools', 'cleaning', 'uniforms', 'equipment',
            'unassigned', 'external-client'} <= slugs


def test_form_detail_prefills_approver_from_login(auth_client):
    data = auth_client.get('/api/issues/office-supplies').get_json()['data']

    assert data['form']['theme'] == 'pink'
    assert data['state']['header']['approver_id'] == 'A100'
    assert len(data['state']['rows']) == 1
    assert data['search_debounce_ms'] == 300
    assert data['today']


def test_unknown_form_is_not_found(auth_client):
    response = auth_client.get('/api/issues/spaceships')

    assert response.status_code == 404
    assert response.get_json()['feedback']['type'] == 'error'


def test_catalog_and_collaborator_lookups(auth_client):
    catalog = auth_client.get('/api/issues/tools/catalog?q=hammer').get_json()['data']
    directory = auth_client.get('/api/issues/tools/collaborators').get_json()['data']

    assert [item['code'] for item in catalog] == ['TL-001']
    assert directory['current_approver_id'] == 'A100'
    assert {c['identification'] for c in directory['receivers']} == {'R300', 'R400'}


def test_catalog_bulk_endpoint_pages(auth_client):
    data = auth_client.get('/api/issues/tools/catalog/all?page=1&per_page=5').get_json()['data']

    assert len(data['items']) == 5
    assert data['has_more'] is True


def test_quantity_above_stock_is_clamped_with_warning(auth_client):
    _select(auth_client, 'office-supplies', 0, 'OF-001')

    response = auth_client.patch('/api/issues/office-supplies/rows/0', json={'field': 'quantity', 'value': 50})
    body = response.get_json()

    assert body['data']['rows'][0]['quantity'] == 40
    assert body['feedback']['type'] == 'warning'


def test_non_editable_field_is_rejected(auth_client):
    response = auth_client.patch('/api/issues/office-supplies/rows/0', json={'field': 'item_code', 'value': 'X'})

    assert response.status_code == 422


def test_duplicate_item_selection_returns_warning(auth_client):
    _select(auth_client, 'tools', 0, 'TL-001')
    assert auth_client.post('/api/issues/tools/rows').status_code == 201

    response = auth_client.put('/api/issues/tools/rows/1/item', json={'code': 'TL-001'})
    body = response.get_json()

    assert response.status_code == 422
    assert body['feedback']['type'] == 'warning'
    rows = auth_client.get('/api/issues/tools').get_json()['data']['state']['rows']
    assert [row['item_code'] for row in rows] == ['TL-001', '']


def test_row_removal_keeps_placeholder(auth_client):
    response = auth_client.delete('/api/issues/cleaning/rows/0')

    assert len(response.get_json()['data']['rows']) == 1


def test_submit_persists_issue_and_resets_draft(app, auth_client):
    _select(auth_client, 'office-supplies', 0, 'OF-001', quantity=5)
    _header(auth_client, 'office-supplies', requester_id='R300', destination='Finance', comments='Monthly')

    response = auth_client.post('/api/issues/office-supplies/submit')
    body = response.get_json()

    assert response.status_code == 201, body
    assert body['feedback']['type'] == 'success'
    assert body['data']['receipt_number'] == 'SA-0001'
    assert body['data']['state']['rows'] == [{
        'item_code': '', 'item_name': '', 'quantity': 0.0, 'unit': '', 'unit_price': 0.0,
        'brand': '', 'available_quantity': 0.0, 'image_url': None,
    }]

    with app.app_context():
        issue = db.session.get(Issue, 1)
        request = db.session.get(IssueRequest, issue.request_number)
        assert issue.approver_id == 'A100'
        assert issue.requester_id == 'R300'
        assert issue.finalized is True
        assert request.request_type_id == 2
        assert request.destination == 'Finance'
        assert [(line.article_code, line.quantity) for line in IssueLine.query.all()] == [('OF-001', 5)]


def test_submit_without_requester_is_rejected(app, auth_client):
    _select(auth_client, 'office-supplies', 0, 'OF-001', quantity=1)

    response = auth_client.post('/api/issues/office-supplies/submit')

    assert response.status_code == 422
    assert response.get_json()['message'] == EM.MISSING_RESPONSIBLE
    with app.app_context():
        assert Issue.query.count() == 0


def test_submit_rejects_when_live_stock_dropped(app, auth_client):
    _select(auth_client, 'tools', 0, 'TL-001', quantity=6)
    _header(auth_client, 'tools', requester_id='R300')
    with app.app_context():
        issue = Issue(approver_id='A200', requester_id='R400')
        db.session.add(issue)
        db.session.flush()
        db.session.add(IssueLine(issue_id=issue.id, article_code='TL-001', quantity=2))
        db.session.commit()

    response = auth_client.post('/api/issues/tools/submit')

    assert response.status_code == 422
    assert 'only has 4 available' in response.get_json()['message']
    with app.app_context():
        assert Issue.query.count() == 1


def test_equipment_form_requires_asset_and_links_it(app, auth_client):
    _select(auth_client, 'equipment', 0, 'EQ-001', quantity=2)
    _header(auth_client, 'equipment', requester_id='R300')

    rejected = auth_client.post('/api/issues/equipment/submit')
    assert rejected.status_code == 422
    assert rejected.get_json()['message'] == EM.MISSING_ASSET

    _header(auth_client, 'equipment', asset_id=1)
    accepted = auth_client.post('/api/issues/equipment/submit')
    assert accepted.status_code == 201

    issue_id = accepted.get_json()['data']['issue_id']
    with app.app_context():
        assert IssueAsset.query.filter_by(issue_id=issue_id, asset_id=1).count() == 1


def test_external_client_flow_submits_unfinalized_then_finalizes(app, auth_client):
    _select(auth_client, 'external-client', 0, 'UN-001', quantity=2)
    _header(auth_client, 'external-client', requester_id='R400', request_number=9001)

    response = auth_client.post('/api/issues/external-client/submit')
    body = response.get_json()

    assert response.status_code == 201
    assert body['feedback']['timeout_ms'] == 5000
    assert body['data']['redirect_to'] == '/issues/external-client'
    assert body['data']['redirect_delay_ms'] == 1500
    issue_id = body['data']['issue_id']
    with app.app_context():
        issue = db.session.get(Issue, issue_id)
        assert issue.finalized is False
        assert issue.request_number == 9001
        assert IssueRequest.query.count() == 0

    finalized = auth_client.post(f'/api/issues/external-client/issues/{issue_id}/finalize')
    assert finalized.status_code == 200
    with app.app_context():
        assert db.session.get(Issue, issue_id).finalized is True

    missing = auth_client.post('/api/issues/external-client/issues/999/finalize')
    assert missing.status_code == 404


def test_external_client_requires_request_number(auth_client):
    _select(auth_client, 'external-client', 0, 'UN-001', quantity=1)
    _header(auth_client, 'external-client', requester_id='R400')

    response = auth_client.post('/api/issues/external-client/submit')

    assert response.status_code == 422
    assert response.get_json()['message'] == EM.MISSING_REQUEST_NUMBER


def test_concurrent_submit_is_refused(app, auth_client):
    _select(auth_client, 'office-supplies', 0, 'OF-001', quantity=1)
    _header(auth_client, 'office-supplies', requester_id='R300')
    with app.app_context():
        cache.add('issue-submit:1:office-supplies', True, timeout=60)

    response = auth_client.post('/api/issues/office-supplies/submit')

    assert response.status_code == 409
    assert response.get_json()['feedback']['type'] == 'warning'
    with app.app_context():
        assert Issue.query.count() == 0


def test_typed_form_ignores_client_request_number_and_creates_request(app, auth_client):
    _select(auth_client, 'office-supplies', 0, 'OF-001', quantity=1)
    header = _header(auth_client, 'office-supplies', requester_id='R300', request_number=4242)
    assert header['request_number'] is None

    response = auth_client.post('/api/issues/office-supplies/submit')

    assert response.status_code == 201
    with app.app_context():
        request = IssueRequest.query.one()
        issue = db.session.get(Issue, response.get_json()['data']['issue_id'])
        assert issue.request_number == request.id
        assert issue.request_number != 4242


def test_header_with_non_string_timestamp_is_ignored(auth_client):
    header = _header(auth_client, 'office-supplies', requested_at=5, destination=12)

    assert header['requested_at'] is None
    assert header['destination'] == '12'


def test_selecting_item_without_stock_returns_warning(app, auth_client):
    with app.app_context():
        db.session.add(Article(code='ZZ-000', name='Discontinued stapler'))
        db.session.commit()

    response = auth_client.put('/api/issues/office-supplies/rows/0/item', json={'code': 'ZZ-000'})
    body = response.get_json()

    assert response.status_code == 422
    assert body['feedback']['type'] == 'warning'
    assert body['message'] == WM.NO_STOCK
    rows = auth_client.get('/api/issues/office-supplies').get_json()['data']['state']['rows']
    assert rows[0]['item_code'] == ''
