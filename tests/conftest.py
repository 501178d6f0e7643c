import io

import pytest
from reportlab.pdfgen import canvas

from medmap import MindMapAPIServer
from medmap.config import Config


class FakeCompletion:
    """Stands in for Generator.complete; replies per pattern, raises when offline"""

    def __init__(self):
        self.replies = {}
        self.error = RuntimeError("model offline")
        self.calls = []

    def __call__(self, pattern, variables=None, data=None, options=None, **kwargs):
        self.calls.append({"pattern": pattern, "variables": variables, "data": data, "options": options})
        if self.error is not None:
            raise self.error
        reply = self.replies[pattern]
        if callable(reply):
            return reply(variables or {}, data or {})
        return reply


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def server(config):
    return MindMapAPIServer("medmap-test", config=config)


@pytest.fixture
def client(server):
    return server.app.test_client()


@pytest.fixture
def fake_llm(server, monkeypatch):
    fake = FakeCompletion()
    monkeypatch.setattr(server.generator, "complete", fake)
    return fake


@pytest.fixture
def notes_pdf():
    buf = io.BytesIO()
    pdf = canvas.Canvas(buf)
    pdf.drawString(72, 720, "Renal physiology: the nephron filters blood.")
    pdf.showPage()
    pdf.save()
    return buf.getvalue()
