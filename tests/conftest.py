"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.taroize import TaroizeConverter


@pytest.fixture
def converter():
    """A converter using the default settings."""
    return TaroizeConverter()


@pytest.fixture
def client():
    """HTTP client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def page_files(tmp_path):
    """A page written to disk as the three mini-program source files."""
    wxml = tmp_path / "index.wxml"
    wxml.write_text('<view class="title">{{title}}</view>', encoding="utf-8")
    script = tmp_path / "index.js"
    script.write_text("Page({ data: { title: 'Hello' } })", encoding="utf-8")
    json = tmp_path / "index.json"
    json.write_text('{"navigationBarTitleText": "Home"}', encoding="utf-8")
    return {"wxml": wxml, "js": script, "json": json, "dir": tmp_path}
