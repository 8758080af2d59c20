from tests.conftest import ANA

def test_register_then_login_scenario(client):
    resp = client.post('/register', json=ANA)
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "registered"}

    resp = client.post('/register', json={**ANA, "taxId": "222.222.222-22"})
    assert resp.status_code == 409
    assert resp.json() == {"success": False, "message": "email already registered"}

    resp = client.post('/login', json={"email": "ana@x.com", "password": "wrong"})
    assert resp.status_code == 401
    assert resp.json()["success"] is False

    resp = client.post('/login', json={"email": "ana@x.com", "password": "p1"})
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "message": "login ok",
        "customer": {"id": 1, "name": "Ana"},
    }

def test_duplicate_tax_id_with_new_email(client):
    client.post('/register', json=ANA)
    resp = client.post('/register', json={**ANA, "email": "other@x.com"})
    assert resp.status_code == 409
    assert resp.json()["message"] == "taxId already registered"

def test_duplicate_email_wins_over_duplicate_tax_id(client):
    client.post('/register', json=ANA)
    resp = client.post('/register', json=ANA)
    assert resp.status_code == 409
    assert resp.json()["message"] == "email already registered"

def test_unknown_email_and_wrong_password_look_the_same(client):
    client.post('/register', json=ANA)
    wrong_password = client.post('/login', json={"email": "ana@x.com", "password": "P1"})
    unknown_email = client.post('/login', json={"email": "nobody@x.com", "password": "p1"})
    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()

def test_login_email_is_case_sensitive(client):
    client.post('/register', json=ANA)
    resp = client.post('/login', json={"email": "ANA@x.com", "password": "p1"})
    assert resp.status_code == 401

def test_list_clientes_empty(client):
    resp = client.get('/clientes')
    assert resp.status_code == 200
    assert resp.json() == []

def test_list_clientes_never_returns_passwords(client):
    client.post('/register', json=ANA)
    client.post('/register', json={
        "name": "Bruno",
        "taxId": "333.333.333-33",
        "address": "Rua B",
        "email": "bruno@x.com",
        "password": "segredo",
    })
    resp = client.get('/clientes')
    assert resp.status_code == 200
    rows = resp.json()
    assert [r["name"] for r in rows] == ["Ana", "Bruno"]
    for row in rows:
        assert set(row) == {"id", "name", "taxId", "address", "email", "createdAt"}
        assert row["createdAt"] is not None
    assert "p1" not in resp.text and "segredo" not in resp.text

def test_register_accepts_portuguese_keys(client):
    resp = client.post('/register', json={
        "nome": "Carla",
        "cpf": "444.444.444-44",
        "endereco": "Rua C",
        "email": "carla@x.com",
        "password": "p3",
    })
    assert resp.status_code == 200
    row = client.get('/clientes').json()[0]
    assert row["name"] == "Carla"
    assert row["taxId"] == "444.444.444-44"
    assert row["address"] == "Rua C"

def test_register_and_login_never_echo_password(client):
    register = client.post('/register', json=ANA)
    login = client.post('/login', json={"email": "ana@x.com", "password": "p1"})
    assert "p1" not in register.text
    assert "password" not in login.text

def test_malformed_body_is_rejected_with_400(client):
    resp = client.post('/register', content="{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "invalid request body"}

def test_missing_field_is_rejected_with_400(client):
    payload = dict(ANA)
    del payload["taxId"]
    resp = client.post('/register', json=payload)
    assert resp.status_code == 400
    resp = client.post('/login', json={"email": "ana@x.com"})
    assert resp.status_code == 400

def test_endpoints_answer_503_without_database(offline_client):
    expected = {"success": False, "message": "database unavailable"}
    resp = offline_client.post('/register', json=ANA)
    assert resp.status_code == 503
    assert resp.json() == expected
    resp = offline_client.post('/login', json={"email": "ana@x.com", "password": "p1"})
    assert resp.status_code == 503
    assert resp.json() == expected
    resp = offline_client.get('/clientes')
    assert resp.status_code == 503
    assert resp.json() == expected

def test_store_errors_answer_500_without_details(broken_client):
    resp = broken_client.post('/register', json=ANA)
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "error checking email"}

    resp = broken_client.post('/login', json={"email": "ana@x.com", "password": "p1"})
    assert resp.status_code == 500
    assert resp.json()["message"] == "error verifying credentials"

    resp = broken_client.get('/clientes')
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "error listing customers"}
    assert "server closed" not in resp.text

def test_cors_allows_any_origin(client):
    resp = client.options('/register', headers={
        "Origin": "http://example.com",
        "Access-Control-Request-Method": "POST",
        "Access-Control-Request-Headers": "content-type",
    })
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] in ("*", "http://example.com")

def test_nul_characters_are_rejected_with_400(client):
    resp = client.post('/register', json={**ANA, "email": "ana\u0000@x.com"})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "invalid request body"}
    resp = client.post('/login', json={"email": "ana@x.com", "password": "p\u00001"})
    assert resp.status_code == 400
    assert client.get('/clientes').json() == []
