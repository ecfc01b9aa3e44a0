import json
from unittest.mock import AsyncMock, patch

import pytest
from structlog.testing import capture_logs

from src.errors import TransportError
from src.main import build_parser, main

OG_IMAGE_HTML = '<meta property="og:image" content="https://cdn/photo.jpg?a=1&amp;b=2" />'


def _mock_session():
    session = AsyncMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return session


def _run_main(argv, fetch):
    with (
        patch("src.main.configure_logging"),
        patch("src.main.aiohttp.ClientSession", return_value=_mock_session()),
        patch("src.main.fetch_page", new=fetch),
        patch("src.main.asyncio.sleep", new_callable=AsyncMock) as mock_sleep,
        capture_logs() as logs,
    ):
        code = main(argv)
    return code, mock_sleep, logs


def test_parser_defaults():
    args = build_parser().parse_args(["https://instagram.com/p/A/"])
    assert args.urls == ["https://instagram.com/p/A/"]
    assert args.timeout == 15.0
    assert args.pretty is False


def test_prints_json_record(capsys):
    fetch = AsyncMock(return_value=OG_IMAGE_HTML)
    code, _, _ = _run_main(["https://www.instagram.com/p/ABC/", "--delay", "0"], fetch)

    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out == {"type": "image", "url": "https://cdn/photo.jpg?a=1&b=2", "source": "og_meta"}
    assert fetch.await_args.kwargs["timeout"] == 15.0


def test_delay_between_urls(capsys):
    fetch = AsyncMock(return_value=OG_IMAGE_HTML)
    code, mock_sleep, _ = _run_main(
        ["https://instagram.com/p/A/", "https://instagram.com/p/B/", "--delay", "1.5"],
        fetch,
    )

    assert code == 0
    assert len(capsys.readouterr().out.strip().splitlines()) == 2
    mock_sleep.assert_awaited_once_with(1.5)


def test_transport_failure_exit_code(capsys):
    fetch = AsyncMock(side_effect=TransportError.from_status(429))
    code, _, logs = _run_main(["https://instagram.com/p/A/"], fetch)

    assert code == 1
    assert logs[-1]["event"] == "download_failed"
    assert logs[-1]["kind"] == "TransportError"
    err = capsys.readouterr().err
    assert "Rate limited" in err
    assert "hint:" in err


def test_invalid_input_exit_code(capsys):
    fetch = AsyncMock(return_value=OG_IMAGE_HTML)
    code, _, _ = _run_main(["not-a-url"], fetch)

    assert code == 2
    assert "Invalid Instagram URL" in capsys.readouterr().err
    fetch.assert_not_awaited()


def test_urls_from_file(tmp_path, capsys):
    url_file = tmp_path / "links.txt"
    url_file.write_text(
        "saved: https://www.instagram.com/reel/R1/, also https://example.com/x\n",
        encoding="utf-8",
    )
    fetch = AsyncMock(return_value=OG_IMAGE_HTML)
    code, _, _ = _run_main(["--file", str(url_file), "--delay", "0"], fetch)

    assert code == 0
    assert fetch.await_args.args[0] == "https://www.instagram.com/reel/R1/"


def test_no_urls_is_usage_error():
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 2


def test_session_passed_to_fetcher():
    fetch = AsyncMock(return_value=OG_IMAGE_HTML)
    session = _mock_session()
    with (
        patch("src.main.configure_logging"),
        patch("src.main.aiohttp.ClientSession", return_value=session),
        patch("src.main.fetch_page", new=fetch),
    ):
        main(["https://instagram.com/p/A/"])

    assert fetch.await_args.kwargs["session"] is session


def test_missing_url_file_is_usage_error(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--file", str(tmp_path / "missing.txt")])

    assert exc_info.value.code == 2
    assert "cannot read" in capsys.readouterr().err
