from PySide6.QtCore import QObject, Signal

from lspfloat.controllers.float_controller import PUBLISH_DIAGNOSTICS, FloatController
from lspfloat.lsp.types import DiagnosticSeverity


class FakeClient(QObject):
    notificationReceived = Signal(str, object)


def publish(uri: str, *items: dict) -> dict:
    return {"uri": uri, "diagnostics": list(items)}


def lsp_item(line: int, message: str, severity: int = 1) -> dict:
    return {
        "range": {"start": {"line": line, "character": 0}, "end": {"line": line, "character": 4}},
        "message": message,
        "severity": severity,
        "source": "pyright",
    }


def test_published_diagnostics_land_in_client_namespace(engine, document) -> None:
    controller = FloatController(engine)
    client = FakeClient()
    ns = controller.attach_client(client, "pyright")

    client.notificationReceived.emit(
        PUBLISH_DIAGNOSTICS, publish("file:///project/main.py", lsp_item(2, "bad", 2))
    )

    (diag,) = engine.get(document)
    assert engine.get_namespace(ns).name == "lsp:pyright"
    assert (diag.lnum, diag.message, diag.severity) == (2, "bad", DiagnosticSeverity.WARN)


def test_republishing_replaces_previous_set(engine, document) -> None:
    controller = FloatController(engine)
    uri = "file:///project/main.py"

    controller.on_notification("ruff", PUBLISH_DIAGNOSTICS, publish(uri, lsp_item(0, "a"), lsp_item(1, "b")))
    controller.on_notification("ruff", PUBLISH_DIAGNOSTICS, publish(uri))

    assert engine.get(document) == []


def test_clients_keep_separate_namespaces(engine, document) -> None:
    controller = FloatController(engine)
    uri = "file:///project/main.py"

    controller.on_notification("ruff", PUBLISH_DIAGNOSTICS, publish(uri, lsp_item(0, "a")))
    controller.on_notification("mypy", PUBLISH_DIAGNOSTICS, publish(uri, lsp_item(0, "b")))

    assert sorted(d.message for d in engine.get(document)) == ["a", "b"]
    assert controller.namespace_for_client("ruff") != controller.namespace_for_client("mypy")
    assert controller.namespace_for_client("ruff") == controller.namespace_for_client(" ruff ")


def test_other_methods_and_unknown_documents_are_ignored(engine, document) -> None:
    controller = FloatController(engine)

    controller.on_notification("x", "window/logMessage", {"message": "hi"})
    controller.on_notification("x", PUBLISH_DIAGNOSTICS, publish("file:///elsewhere.py", lsp_item(0, "a")))
    controller.on_notification("x", PUBLISH_DIAGNOSTICS, None)

    assert engine.get(None) == []


def test_hover_result_is_forwarded(engine, document) -> None:
    controller = FloatController(engine)
    shown = []
    engine.docs.messageShown.connect(lambda role, html: shown.append(role))

    controller.on_hover_result({"contents": "signature"})

    assert shown == ["hover"]


def test_bad_float_options_are_reported(engine, document) -> None:
    controller = FloatController(engine)
    messages = []
    controller.statusMessage.connect(messages.append)

    controller.open_float({"scope": "window"})

    assert len(messages) == 1
    assert "scope" in messages[0]
