"""
Tests for the HTTP API
"""

import backend.main as main


def _upload(client, content, content_type='text/csv', filename='data.csv'):
    return client.post(
        '/api/interpolate',
        files={'csvFile': (filename, content, content_type)},
    )


def test_root(client):
    response = client.get('/')
    assert response.status_code == 200
    assert response.json()['status'] == 'ok'


def test_health(client):
    body = client.get('/health').json()
    assert body['status'] == 'ok'
    assert 'timestamp' in body


def test_methods(client):
    methods = client.get('/methods').json()['methods']

    assert [m['methodId'] for m in methods] == [
        'linear', 'spline', 'newton_forward', 'newton_backward', 'divided'
    ]
    assert methods[2]['displayName'] == 'Newton forward'


def test_upload_valid_csv(client, csv_quadratic):
    response = _upload(client, csv_quadratic)

    assert response.status_code == 200
    body = response.json()
    assert body['recommendation'] in body['errors']
    assert len(body['interpolated']['x']) == body['metadata']['pointCount']
    assert body['originalData']['x'] == [0.0, 1.0, 2.0, 3.0, 4.0]


def test_upload_semicolon_csv(client):
    response = _upload(client, "x;y\n0;1\n1;3\n2;2\n")

    assert response.status_code == 200
    assert response.json()['originalData']['y'] == [1.0, 3.0, 2.0]


def test_upload_single_row_fails(client):
    response = _upload(client, "x,y\n1,2\n")

    assert response.status_code == 400
    assert 'insufficient points' in response.json()['error']


def test_upload_missing_file(client):
    response = client.post('/api/interpolate')

    assert response.status_code == 400
    assert response.json() == {'error': 'No file uploaded'}


def test_upload_rejects_non_csv(client):
    response = _upload(client, b'\x89PNG', content_type='image/png', filename='plot.png')

    assert response.status_code == 415
    assert response.json() == {'error': 'Only CSV files are allowed'}


def test_upload_too_large(client, monkeypatch, csv_quadratic):
    monkeypatch.setattr(main, 'MAX_FILE_SIZE', 10)

    response = _upload(client, csv_quadratic)

    assert response.status_code == 413
    assert 'too large' in response.json()['error']


def test_json_points(client):
    points = [{'x': x, 'y': x * x} for x in range(5)]
    response = client.post('/api/interpolate/json', json={'points': points})

    assert response.status_code == 200
    assert response.json()['metadata']['dataRange']['y'] == {'min': 0.0, 'max': 16.0}


def test_json_single_point_fails(client):
    response = client.post('/api/interpolate/json', json={'points': [{'x': 1, 'y': 1}]})

    assert response.status_code == 400
    assert 'error' in response.json()


def test_json_duplicates_collapse_to_one_point(client):
    points = [{'x': 1, 'y': 1}, {'x': 1, 'y': 3}]
    response = client.post('/api/interpolate/json', json={'points': points})

    assert response.status_code == 400
    assert 'deduplication' in response.json()['error']


def test_json_invalid_body(client):
    response = client.post('/api/interpolate/json', json={'rows': []})

    assert response.status_code == 422
    assert 'points' in response.json()['error']


def test_unexpected_failure_is_generic(client, monkeypatch, csv_quadratic):
    def broken(x, y):
        raise RuntimeError("boom")

    monkeypatch.setattr(main, 'analyze', broken)

    response = _upload(client, csv_quadratic)

    assert response.status_code == 500
    assert response.json() == {'error': 'Internal server error'}


def test_json_overflowing_range_fails(client):
    points = [{'x': -1e308, 'y': 0}, {'x': 1e308, 'y': 1}]
    response = client.post('/api/interpolate/json', json={'points': points})

    assert response.status_code == 400
    assert 'too wide' in response.json()['error']


def test_upload_field_name(client, csv_quadratic):
    assert main.UPLOAD_FIELD == 'csvFile'

    response = client.post(
        '/api/interpolate',
        files={'file': ('data.csv', csv_quadratic, 'text/csv')},
    )
    assert response.status_code == 400
    assert response.json()['error'] == 'No file uploaded'
