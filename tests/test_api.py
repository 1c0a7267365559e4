"""HTTP API tests."""

from app import __version__
from app.config import settings


def test_root_health(client):
    """Test the container health check."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "UP", "service": "taroize"}


def test_api_health(client):
    """Test the routed health check."""
    response = client.get("/api/taroize/health")
    assert response.status_code == 200
    assert response.json()["status"] == "UP"


def test_info(client):
    """Test the service info endpoint."""
    data = client.get("/api/taroize/info").json()
    assert data["version"] == __version__
    assert data["conversion"]["legacyNamespace"] == "wx"
    assert data["conversion"]["targetNamespace"] == "Taro"


def test_root_lists_endpoints(client):
    """Test the root endpoint."""
    data = client.get("/").json()
    assert data["endpoints"]["convert"] == "/api/taroize/convert"


def test_convert(client):
    """Test a page conversion over HTTP."""
    response = client.post("/api/taroize/convert", json={
        "wxml": '<view wx:if="{{ok}}">{{msg}}</view>',
        "script": "Page({ data: { ok: true, msg: 'hi' } })",
        "json": {"navigationBarTitleText": "Home"},
    })
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["kind"] == "Page"
    assert data["components"] == ["Block", "View"]
    assert data["stateKeys"] == ["ok", "msg"]
    assert "{ok && <View>" in data["code"]
    assert "navigationBarTitleText: 'Home'" in data["code"]


def test_convert_with_options(client):
    """Test request options."""
    response = client.post("/api/taroize/convert", json={
        "script": "Page({})",
        "options": {"className": "Detail"},
    })
    assert response.status_code == 200
    assert "export default class Detail extends Taro.Component" in response.json()["code"]


def test_convert_json_text(client):
    """Test page configuration sent as text."""
    response = client.post("/api/taroize/convert", json={
        "script": "Page({})",
        "json": '{"usingComponents": {}}',
    })
    assert response.status_code == 200
    assert "usingComponents: {}" in response.json()["code"]


def test_convert_error_is_422(client):
    """Test that conversion errors map to 422."""
    response = client.post("/api/taroize/convert", json={
        "script": "Page({\n  ...base\n})",
    })
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["error"] == "StructuralUnsupportedError"
    assert detail["line"] == 2
    assert "...base" in detail["frame"]


def test_convert_parse_error_is_422(client):
    """Test a malformed template."""
    response = client.post("/api/taroize/convert", json={"wxml": "<view"})
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "ParseError"


def test_convert_too_large_is_413(client, monkeypatch):
    """Test the source length guard."""
    monkeypatch.setattr(settings, "MAX_SOURCE_LENGTH", 10)
    response = client.post("/api/taroize/convert", json={"wxml": "<view>" + "a" * 20 + "</view>"})
    assert response.status_code == 413


def test_wxml_endpoint(client):
    """Test template-only conversion."""
    response = client.post("/api/taroize/wxml", json={"wxml": "<text>Hi</text>"})
    assert response.status_code == 200
    assert response.json() == {"success": True, "jsx": "<Block>\n  <Text>Hi</Text>\n</Block>"}


def test_wxml_endpoint_error(client):
    """Test template errors over HTTP."""
    response = client.post("/api/taroize/wxml", json={"wxml": '<view wx:for="list"/>'})
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "DirectiveValueError"


def test_convert_deep_nesting_is_422(client):
    """Test that input nested too deeply is rejected, not a server error."""
    response = client.post("/api/taroize/convert", json={
        "wxml": "<view>" * 2000 + "x" + "</view>" * 2000,
    })
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["error"] == "NestingTooDeepError"
    assert detail["message"] == "Template nesting too deep"


def test_wxml_endpoint_requires_wxml(client):
    """Test request validation."""
    response = client.post("/api/taroize/wxml", json={})
    assert response.status_code == 422
