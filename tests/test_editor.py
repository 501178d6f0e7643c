from unittest import mock

import pytest
import requests
from PIL import Image
from pypdf import PdfReader

from medmap.editor import NEW_NODE_LABEL, MindMapEditor
from medmap.fallbacks import demo_mindmap
from medmap.models import CALLBACK_PLACEHOLDER


@pytest.fixture
def api():
    return mock.MagicMock()


@pytest.fixture
def alerts():
    return []


@pytest.fixture
def editor(api, alerts):
    return MindMapEditor.from_dict(demo_mindmap(), client=api, alert=alerts.append)


def test_loaded_nodes_get_callbacks(editor):
    node = editor.get_node("1")
    assert node.data.on_edit == editor.edit_label
    assert node.data.on_regenerate == editor.regenerate
    assert editor.to_dict() == demo_mindmap()


def test_delete_cascades_to_incident_edges_only(editor):
    editor.select("2")
    assert editor.delete_selected()

    assert editor.get_node("2") is None
    assert editor.selected is None
    remaining = {e.id for e in editor.edges}
    assert remaining == {"e1-3", "e1-4", "e3-7", "e3-8", "e4-9", "e4-10"}


def test_delete_without_selection(editor):
    assert not editor.delete_selected()
    assert len(editor.nodes) == 10


def test_add_node(editor):
    node = editor.add_node()
    assert node.id.startswith("node-")
    assert node.data.label == NEW_NODE_LABEL
    assert 100 <= node.position.x < 500
    assert 100 <= node.position.y < 500
    assert editor.nodes[-1] is node


def test_connect(editor):
    edge = editor.connect("5", "9")
    assert edge.id == "e5-9"
    assert edge.style.stroke == "#6366f1"
    assert edge.marker_end.type == "arrowclosed"
    assert editor.connect("5", "9") is None
    with pytest.raises(KeyError):
        editor.connect("5", "missing")


def test_connect_avoids_taken_edge_id(editor):
    editor.edges[0].target = "5"
    assert editor.edges[0].id == "e1-2"

    edge = editor.connect("1", "2")

    assert edge.id == "e1-2-2"
    assert len({e.id for e in editor.edges}) == len(editor.edges)


def test_inline_edit_commits_on_ctrl_enter(editor):
    edit = editor.begin_edit("9")
    assert edit.draft == "Hypertension"
    edit.draft = "Systemic Hypertension"

    assert not edit.handle_key("Enter")
    assert editor.get_node("9").data.label == "Hypertension"
    assert edit.handle_key("Enter", ctrl=True)
    assert editor.get_node("9").data.label == "Systemic Hypertension"


def test_inline_edit_commits_on_blur(editor):
    edit = editor.begin_edit("10")
    edit.draft = "Congestive Heart Failure"
    edit.blur()
    assert editor.get_node("10").data.label == "Congestive Heart Failure"


def test_verify_all_merges_verdicts(editor, api):
    api.verify_medical.return_value = {
        "1": {"verified": True, "confidence": "high", "explanation": "ok", "sources": []},
        "2": {"verified": False, "confidence": "low", "sources": [], "error": "Verification failed"},
    }

    assert editor.verify_all()

    sent = api.verify_medical.call_args.args[0]
    assert len(sent) == 10
    assert sent[0]["data"]["onEdit"] == CALLBACK_PLACEHOLDER
    assert editor.get_node("1").data.verification.confidence == "high"
    assert editor.get_node("2").data.verification.error == "Verification failed"
    assert editor.get_node("3").data.verification is None
    assert not editor.is_verifying


def test_verify_all_transport_failure(editor, api, alerts):
    api.verify_medical.side_effect = requests.HTTPError("500 Server Error")
    before = editor.to_dict()

    assert not editor.verify_all()

    assert alerts == ["Failed to verify medical accuracy"]
    assert editor.to_dict() == before


def test_regenerate(editor, api):
    api.regenerate_node.return_value = {
        "newContent": "Atrioventricular Valves",
        "explanation": "More precise",
        "sources": ["https://www.ncbi.nlm.nih.gov/books/"],
    }

    assert editor.regenerate("6")

    node = editor.get_node("6")
    assert api.regenerate_node.call_args.args[0]["data"]["label"] == "Heart Valves"
    assert node.data.label == "Atrioventricular Valves"
    assert node.data.sources == ["https://www.ncbi.nlm.nih.gov/books/"]
    assert node.data.verification.verified is True
    assert node.data.verification.confidence == "high"


def test_regenerate_transport_failure(editor, api, alerts):
    api.regenerate_node.side_effect = requests.ConnectionError("refused")

    assert not editor.regenerate("6")

    assert alerts == ["Failed to regenerate node"]
    assert editor.get_node("6").data.label == "Heart Valves"
    assert editor.get_node("6").data.verification is None


def test_regenerate_unknown_node(editor, api):
    assert not editor.regenerate("nope")
    api.regenerate_node.assert_not_called()


def test_exports_share_pixel_dimensions(editor, tmp_path):
    editor.get_node("1").data.verification = None
    pdf_size = editor.export_pdf(str(tmp_path / "out" / "mindmap.pdf"))
    jpeg_size = editor.export_jpeg(str(tmp_path / "out" / "mindmap.jpg"))

    assert pdf_size == jpeg_size
    with Image.open(tmp_path / "out" / "mindmap.jpg") as image:
        assert image.size == jpeg_size

    page = PdfReader(str(tmp_path / "out" / "mindmap.pdf")).pages[0]
    assert (float(page.mediabox.width), float(page.mediabox.height)) == jpeg_size


def test_export_failure_alerts(editor, alerts, tmp_path):
    target = tmp_path / "taken"
    target.mkdir()
    assert editor.export_jpeg(str(target)) is None
    assert alerts == ["Failed to export as JPEG"]
