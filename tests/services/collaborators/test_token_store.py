from review_pulse.services.analysis_context import AnalysisContext
from review_pulse.services.collaborators.token_store import TokenStore


def test_load_without_file_returns_none(tmp_path):
    assert TokenStore(tmp_path / "token").load() is None


def test_save_then_load(tmp_path):
    store = TokenStore(tmp_path / "nested" / "token")

    assert store.save("  hf_abc  ") == "hf_abc"
    assert store.load() == "hf_abc"


def test_blank_token_clears(tmp_path):
    store = TokenStore(tmp_path / "token")
    store.save("hf_abc")

    assert store.save("   ") is None
    assert store.load() is None
    assert not store.path.exists()


def test_clear_is_idempotent(tmp_path):
    store = TokenStore(tmp_path / "token")
    store.clear()
    store.save("hf_abc")
    store.clear()
    store.clear()

    assert store.load() is None


def test_context_reads_token_at_startup(tmp_path):
    store = TokenStore(tmp_path / "token")
    store.save("hf_saved")

    context = AnalysisContext(token_store=store)

    assert context.token == "hf_saved"
    assert context.has_token


def test_context_persists_token_changes(tmp_path):
    store = TokenStore(tmp_path / "token")
    context = AnalysisContext(token_store=store)

    context.set_token("hf_new")
    assert store.load() == "hf_new"

    context.set_token("")
    assert context.token is None
    assert store.load() is None

    context.set_token("hf_again")
    context.clear_token()
    assert context.token is None
    assert store.load() is None


def test_context_keeps_token_when_store_is_unwritable(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    context = AnalysisContext(token_store=TokenStore(blocker / "token"))

    assert context.set_token(" hf_session ") == "hf_session"
    assert context.token == "hf_session"
    assert context.has_token

    context.clear_token()
    assert context.token is None
