def test_raspberry_pi_defaults(client):
    response = client.get("/api/settings/raspberry-pi")
    assert response.json() == {"ip": "", "port": "8000"}

def test_raspberry_pi_roundtrip(client):
    response = client.post("/api/settings/raspberry-pi", json={"ip": "10.0.0.7", "port": 5000})
    assert response.json() == {"success": True}
    cookie = response.headers["set-cookie"]
    assert "HttpOnly" in cookie
    assert "Max-Age=2592000" in cookie

    assert client.get("/api/settings/raspberry-pi").json() == {"ip": "10.0.0.7", "port": "5000"}

def test_raspberry_pi_rejects_bad_ip(client):
    response = client.post("/api/settings/raspberry-pi", json={"ip": "pi.local", "port": "5000"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid IP address format"}

def test_raspberry_pi_rejects_bad_port(client):
    for port in [None, "abc", 0, 70000]:
        response = client.post("/api/settings/raspberry-pi", json={"ip": "10.0.0.7", "port": port})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid port number"}

def test_demo_mode_defaults_off(client):
    assert client.get("/api/settings/demo-mode").json() == {"enabled": False}

def test_demo_mode_toggle(client):
    response = client.post("/api/settings/demo-mode", json={"enabled": True})
    assert response.json() == {"success": True, "enabled": True}
    assert client.get("/api/settings/demo-mode").json() == {"enabled": True}

    client.post("/api/settings/demo-mode", json={"enabled": False})
    assert client.get("/api/settings/demo-mode").json() == {"enabled": False}

def test_demo_mode_requires_boolean(client):
    response = client.post("/api/settings/demo-mode", json={"enabled": "yes"})
    assert response.status_code == 400
    assert response.json() == {"error": "Enabled must be a boolean"}

def test_raspberry_pi_rejects_trailing_newline(client):
    response = client.post("/api/settings/raspberry-pi", json={"ip": "10.0.0.7\n", "port": "5000"})
    assert response.status_code == 400
    assert "raspberry_pi_ip" not in client.cookies
