import pytest

from lspfloat.diagnostics.options import Disabled, Enabled
from lspfloat.diagnostics.query import DiagnosticQuery, normalize_scope
from lspfloat.diagnostics.store import DiagnosticStore
from lspfloat.errors import DiagnosticConfigError
from lspfloat.lsp.types import DiagnosticSeverity
from lspfloat.services.host import BufferHost


@pytest.fixture
def store(host: BufferHost) -> DiagnosticStore:
    return DiagnosticStore(register_discard=host.watch_discard)


@pytest.fixture
def queries(store: DiagnosticStore, host: BufferHost) -> DiagnosticQuery:
    return DiagnosticQuery(store, host)


def test_clamp_adjusts_a_copy_and_leaves_the_cache_untouched(store, queries, document, make_diag) -> None:
    store.put(document, 1, [make_diag(-3, col=-2, end_lnum=40, end_col=-1, message="stale")])

    (clamped,) = queries.query(document, {"scope": "buffer"}, clamp=True)

    assert (clamped.lnum, clamped.col, clamped.end_lnum, clamped.end_col) == (0, 0, 9, 0)
    (cached,) = store.get(document)
    assert (cached.lnum, cached.col, cached.end_lnum, cached.end_col) == (-3, -2, 40, -1)


def test_clamp_skips_unloaded_documents(store, queries, host, document, make_diag) -> None:
    store.put(document, 1, [make_diag(25, message="far away")])
    host.unload(document)

    (diag,) = queries.query(document, {"scope": "buffer"}, clamp=True)

    assert diag.lnum == 25


def test_clamp_disabled_returns_original_coordinates(store, queries, document, make_diag) -> None:
    store.put(document, 1, [make_diag(25, message="far away")])

    (diag,) = queries.query(document, {"scope": "buffer"}, clamp=False)

    assert diag.lnum == 25


def test_clamped_record_matches_line_scope_of_last_line(store, queries, document, make_diag) -> None:
    store.put(document, 1, [make_diag(25, message="past the end")])

    assert [d.message for d in queries.query(document, {"scope": "line", "pos": 9})] == ["past the end"]


def test_documents_without_diagnostics_yield_empty_results(queries, document) -> None:
    assert queries.query(document, {"scope": "buffer"}) == []
    assert queries.query(document, {"scope": "line", "pos": 3}) == []
    assert queries.query(99, {"scope": "cursor", "pos": (0, 0)}) == []


def test_line_scope_uses_host_cursor_when_pos_is_unset(store, queries, host, document, make_diag) -> None:
    store.put(document, 1, [make_diag(4, message="four"), make_diag(5, message="five")])
    host.set_cursor(5, 3)

    assert [d.message for d in queries.query(document, {})] == ["five"]
    assert [d.message for d in queries.query(document, {"scope": "l", "pos": 4})] == ["four"]


def test_cursor_scope_column_rule(store, queries, document, make_diag) -> None:
    """Only the start line is matched; a range spilling onto the next line is
    covered from its start line, see the later-end-line test below."""
    store.put(document, 1, [make_diag(5, col=2, end_lnum=5, end_col=8, message="span")])

    def hits(pos):
        return [d.message for d in queries.query(document, {"scope": "cursor", "pos": pos})]

    assert hits((5, 6)) == ["span"]
    assert hits((5, 9)) == []
    assert hits((5, 1)) == []
    assert hits((6, 0)) == []


def test_cursor_scope_treats_a_later_end_line_as_covering(store, queries, document, make_diag) -> None:
    store.put(document, 1, [make_diag(5, col=2, end_lnum=6, end_col=1, message="spills")])

    result = queries.query(document, {"scope": "c", "pos": (5, 7)})

    assert [d.message for d in result] == ["spills"]


def test_cursor_scope_clamps_start_column_to_line_length(store, queries, document, make_diag) -> None:
    # "line 5" is six characters long.
    store.put(document, 1, [make_diag(5, col=20, end_lnum=5, end_col=25, message="eol")])

    assert [d.message for d in queries.query(document, {"scope": "cursor", "pos": (5, 5)})] == ["eol"]
    assert queries.query(document, {"scope": "cursor", "pos": (5, 4)}) == []


def test_invalid_scope_and_pos_are_config_errors(queries, document) -> None:
    with pytest.raises(DiagnosticConfigError):
        queries.query(document, {"scope": "window"})
    for pos in ("3", (1,), (1, "a"), True, {"line": 1}):
        with pytest.raises(DiagnosticConfigError):
            queries.query(document, {"scope": "line", "pos": pos})


def test_normalize_scope_aliases() -> None:
    assert normalize_scope(None) == "line"
    assert normalize_scope("b") == "buffer"
    assert normalize_scope("cursor") == "cursor"


def test_severity_sort_orders_stably(store, queries, document, make_diag) -> None:
    store.put(
        document,
        1,
        [
            make_diag(0, severity=2, message="w1"),
            make_diag(0, severity=1, message="e"),
            make_diag(0, severity=3, message="i"),
            make_diag(0, severity=2, message="w2"),
        ],
    )

    def order(severity_sort):
        opts = {"scope": "buffer", "severity_sort": severity_sort}
        return [d.message for d in queries.query(document, opts)]

    assert order(Disabled()) == ["w1", "e", "i", "w2"]
    assert order(Enabled({})) == ["e", "w1", "w2", "i"]
    assert order(True) == ["e", "w1", "w2", "i"]
    assert order(Enabled({"reverse": True})) == ["i", "w1", "w2", "e"]


def test_severity_and_namespace_filters(store, queries, document, make_diag) -> None:
    store.put(document, 1, [make_diag(0, severity=DiagnosticSeverity.ERROR, message="a")])
    store.put(document, 2, [make_diag(0, severity=DiagnosticSeverity.HINT, message="b")])

    assert [d.message for d in queries.query(document, {"scope": "buffer", "namespace": 2})] == ["b"]
    assert [d.message for d in queries.query(document, {"scope": "buffer", "severity": "error"})] == ["a"]


def test_document_zero_means_current_document(store, queries, host, document, make_diag) -> None:
    other = host.open_document("x")
    store.put(document, 1, [make_diag(0, message="current")])
    store.put(other, 1, [make_diag(0, message="other")])

    assert [d.message for d in queries.query(0, {"scope": "buffer"})] == ["current"]
    assert [d.message for d in queries.select(None)] == ["current", "other"]


def test_document_discarded_during_query_is_treated_as_empty(store, make_diag) -> None:
    class WipingHost(BufferHost):
        def line_count(self, doc):
            store.discard(doc)
            return super().line_count(doc)

    wiping = WipingHost()
    doc = wiping.open_document("only line")
    queries = DiagnosticQuery(store, wiping)
    store.put(doc, 1, [make_diag(3, message="gone soon")])

    result = queries.query(doc, {"scope": "buffer"})

    assert result == []
    assert store.documents() == []


def test_host_wipeout_discards_cached_document(store, queries, host, document, make_diag) -> None:
    store.put(document, 1, [make_diag(0)])

    host.wipeout(document)

    assert store.documents() == []
    assert queries.select(document) == []


def test_count_sources(store, queries, document, make_diag) -> None:
    store.put(document, 1, [make_diag(0, source="pyright"), make_diag(1, source="pyright")])
    store.put(document, 2, [make_diag(0, source="ruff"), make_diag(2)])

    assert queries.count_sources(document) == 2
    assert queries.count_sources(99) == 0
