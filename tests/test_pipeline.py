import logging
from pathlib import Path

import pytest
from eth_utils import to_checksum_address

from tweetdrop.config import DropConfig
from tweetdrop.errors import FetchError, OutputError
from tweetdrop.models import CandidateKind, PostPage, RawCandidate, SourceItem
from tweetdrop.pipeline import (
    collect_addresses,
    collect_posts,
    resolve_candidate,
    resolve_candidates,
    run_pipeline,
)
from tweetdrop.resolver import NoResolution

LOGGER = logging.getLogger("test")
VITALIK = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
UPPER = "0xABCDEF1234567890ABCDEF1234567890ABCDEF12"


class DummySource:
    def __init__(self, pages: dict[str | None, PostPage]) -> None:
        self.pages = pages
        self.calls: list[str | None] = []

    def fetch_page(self, conversation_id: str, next_token: str | None = None) -> PostPage:
        _ = conversation_id
        self.calls.append(next_token)
        return self.pages[next_token]


class FailingSource:
    def fetch_page(self, conversation_id: str, next_token: str | None = None) -> PostPage:
        raise FetchError("rate limited")


class DummyResolver:
    enabled = True

    def __init__(self, mapping: dict[str, str]) -> None:
        self.mapping = mapping
        self.calls: list[str] = []

    def resolve(self, name: str) -> str | None:
        self.calls.append(name)
        return self.mapping.get(name)


def _config(**overrides: object) -> DropConfig:
    values: dict[str, object] = {
        "conversation_id": "42",
        "bearer_token": "token",
        "num_tokens": 10,
        "show_progress": False,
    }
    values.update(overrides)
    return DropConfig(**values)  # type: ignore[arg-type]


def _page(*texts: str, next_token: str | None = None) -> PostPage:
    items = [SourceItem(id=str(index), text=text) for index, text in enumerate(texts)]
    return PostPage(items=items, next_token=next_token)


def test_collect_posts_follows_tokens_until_exhausted() -> None:
    source = DummySource(
        {
            None: _page("a", "b", next_token="t1"),
            "t1": _page("c", next_token="t2"),
            "t2": _page("d"),
        }
    )
    items = collect_posts(source, "42", logger=LOGGER)
    assert [item.text for item in items] == ["a", "b", "c", "d"]
    assert source.calls == [None, "t1", "t2"]


def test_collect_posts_single_page_makes_one_call() -> None:
    source = DummySource({None: _page("only")})
    assert len(collect_posts(source, "42", logger=LOGGER)) == 1
    assert source.calls == [None]


def test_collect_posts_honours_max_pages() -> None:
    source = DummySource({None: _page("a", next_token="t1"), "t1": _page("b", next_token="t2")})
    items = collect_posts(source, "42", logger=LOGGER, max_pages=2)
    assert [item.text for item in items] == ["a", "b"]
    assert source.calls == [None, "t1"]


def test_resolve_candidate_address_paths() -> None:
    resolver = NoResolution()
    good = RawCandidate(token=UPPER, kind=CandidateKind.ADDRESS)
    bad = RawCandidate(token="0x1234", kind=CandidateKind.ADDRESS)
    assert resolve_candidate(good, resolver=resolver, logger=LOGGER) == to_checksum_address(
        UPPER.lower()
    )
    assert resolve_candidate(bad, resolver=resolver, logger=LOGGER) is None


def test_resolve_candidate_names_are_lowercased() -> None:
    resolver = DummyResolver({"vitalik.eth": VITALIK})
    name = RawCandidate(token="Vitalik.ETH", kind=CandidateKind.NAME)
    assert resolve_candidate(name, resolver=resolver, logger=LOGGER) == VITALIK
    assert resolver.calls == ["vitalik.eth"]


def test_resolve_candidate_drops_names_without_resolver_or_result() -> None:
    name = RawCandidate(token="nobody.eth", kind=CandidateKind.NAME)
    assert resolve_candidate(name, resolver=NoResolution(), logger=LOGGER) is None
    assert resolve_candidate(name, resolver=DummyResolver({}), logger=LOGGER) is None


def test_resolve_candidates_preserves_order_with_workers() -> None:
    addresses = [to_checksum_address(f"0x{index:040x}") for index in range(1, 40)]
    mapping = {f"user{index}.eth": address for index, address in enumerate(addresses)}
    candidates = [
        RawCandidate(token=f"USER{index}.eth", kind=CandidateKind.NAME)
        for index in range(len(addresses))
    ]
    sequential = resolve_candidates(
        candidates, resolver=DummyResolver(mapping), logger=LOGGER, workers=1
    )
    threaded = resolve_candidates(
        candidates, resolver=DummyResolver(mapping), logger=LOGGER, workers=8
    )
    assert sequential == threaded == addresses


def test_scenario_address_lands_in_first_batch(tmp_path: Path, monkeypatch) -> None:
    source = DummySource({None: _page("send to 0xABCDEF1234567890ABCDEF1234567890ABCDEF12 thanks")})
    monkeypatch.setattr("tweetdrop.pipeline.TwitterClient", lambda **_kwargs: source)

    output_dir = tmp_path / "output"
    run_pipeline(_config(output_dir=str(output_dir)), logger=LOGGER)
    lines = (output_dir / "batch-0.txt").read_text(encoding="utf-8").splitlines()
    assert lines == [f"{to_checksum_address(UPPER.lower())}, 10"]


def test_scenario_name_dropped_without_rpc() -> None:
    source = DummySource({None: _page("my name is Vitalik.ETH friend")})
    addresses = collect_addresses(
        _config(), source=source, resolver=NoResolution(), logger=LOGGER
    )
    assert addresses == []


def test_duplicates_kept_unless_dedupe_enabled() -> None:
    lower = VITALIK.lower()
    source = DummySource(
        {None: _page(f"gm {lower}", "vitalik.eth", next_token="t1"), "t1": _page(f"{lower}!")}
    )
    resolver = DummyResolver({"vitalik.eth": VITALIK})
    kept = collect_addresses(_config(), source=source, resolver=resolver, logger=LOGGER)
    assert kept == [VITALIK, VITALIK, VITALIK]

    deduped = collect_addresses(
        _config(dedupe=True), source=source, resolver=resolver, logger=LOGGER
    )
    assert deduped == [VITALIK]


def test_scenario_250_addresses_make_three_batches(tmp_path: Path, monkeypatch) -> None:
    texts = [f"wallet 0x{index:040x}" for index in range(1, 251)]
    source = DummySource(
        {None: _page(*texts[:100], next_token="t1"), "t1": _page(*texts[100:])}
    )
    monkeypatch.setattr("tweetdrop.pipeline.TwitterClient", lambda **_kwargs: source)

    output_dir = tmp_path / "output"
    run_pipeline(_config(output_dir=str(output_dir)), logger=LOGGER)
    counts = [
        len((output_dir / f"batch-{index}.txt").read_text(encoding="utf-8").splitlines())
        for index in range(3)
    ]
    assert counts == [100, 100, 50]
    assert not (output_dir / "batch-3.txt").exists()


def test_fetch_error_aborts_before_writing(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr("tweetdrop.pipeline.TwitterClient", lambda **_kwargs: FailingSource())
    output_dir = tmp_path / "output"
    with pytest.raises(FetchError):
        run_pipeline(_config(output_dir=str(output_dir)), logger=LOGGER)
    assert not output_dir.exists()


def test_run_pipeline_uses_resolver_when_rpc_configured(tmp_path: Path, monkeypatch) -> None:
    source = DummySource({None: _page("Vitalik.eth")})
    resolver = DummyResolver({"vitalik.eth": VITALIK})
    captured: dict[str, object] = {}

    def fake_build_resolver(rpc_url, **_kwargs):
        captured["rpc_url"] = rpc_url
        return resolver

    monkeypatch.setattr("tweetdrop.pipeline.TwitterClient", lambda **_kwargs: source)
    monkeypatch.setattr("tweetdrop.pipeline.build_resolver", fake_build_resolver)

    output_dir = tmp_path / "output"
    run_pipeline(
        _config(output_dir=str(output_dir), rpc_url="http://rpc.local"), logger=LOGGER
    )
    assert captured["rpc_url"] == "http://rpc.local"
    assert (output_dir / "batch-0.txt").read_text(encoding="utf-8") == f"{VITALIK}, 10\n"


def test_output_error_logs_unwritten_entries(tmp_path: Path, monkeypatch, caplog) -> None:
    lower = VITALIK.lower()
    source = DummySource({None: _page(f"gm {lower}", f"again {lower}")})
    monkeypatch.setattr("tweetdrop.pipeline.TwitterClient", lambda **_kwargs: source)

    blocker = tmp_path / "output"
    blocker.write_text("not a directory", encoding="utf-8")
    with caplog.at_level(logging.ERROR, logger="test"):
        with pytest.raises(OutputError):
            run_pipeline(_config(output_dir=str(blocker)), logger=LOGGER)

    messages = [record.getMessage() for record in caplog.records]
    assert any("Could not write 2 collected addresses" in message for message in messages)
    assert messages.count(f"batch-0: {VITALIK}, 10") == 2
