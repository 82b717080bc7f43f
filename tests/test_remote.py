"""Unit tests for the GitHub-backed template repository client."""

from __future__ import annotations

import json
import typing as typ

import pytest
import requests

from portfolio_builder.errors import RemoteFetchError
from portfolio_builder.remote import TemplateRepository

if typ.TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture

RAW = "https://raw.githubusercontent.com/owner/templates/main"
TREE_URL = "https://api.example.invalid/repos/owner/templates/git/trees/main"


def _response(
    mocker: MockerFixture,
    *,
    status: int = 200,
    content: bytes = b"",
    payload: object = None,
) -> typ.Any:  # noqa: ANN401 - mock object
    response = mocker.Mock()
    response.status_code = status
    response.content = content
    if payload is None:
        response.json.side_effect = json.JSONDecodeError("Expecting value", "", 0)
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session(mocker: MockerFixture) -> typ.Any:  # noqa: ANN401 - mock object
    return mocker.Mock(spec=requests.Session)


@pytest.fixture
def repository(session: typ.Any) -> TemplateRepository:  # noqa: ANN401
    return TemplateRepository(
        repo="owner/templates",
        token="secret-token",
        api_base="https://api.example.invalid/",
        session=session,
    )


def test_fetch_config_downloads_starter_config(
    mocker: MockerFixture, session: typ.Any, repository: TemplateRepository, tmp_path: Path
) -> None:
    session.get.return_value = _response(mocker, content=b"template_id: '0001'\n")
    destination = tmp_path / "config.yml"

    result = repository.fetch_config("0001", destination)

    assert result == destination
    assert destination.read_bytes() == b"template_id: '0001'\n"
    called_url = session.get.call_args.args[0]
    assert called_url == f"{RAW}/templates/0001/config.yml"


def test_fetch_config_raises_on_http_error(
    mocker: MockerFixture, session: typ.Any, repository: TemplateRepository, tmp_path: Path
) -> None:
    session.get.return_value = _response(mocker, status=404)

    with pytest.raises(RemoteFetchError, match="HTTP 404"):
        repository.fetch_config("9999", tmp_path / "config.yml")

    assert not (tmp_path / "config.yml").exists()


def test_transport_failure_becomes_remote_fetch_error(
    session: typ.Any, repository: TemplateRepository
) -> None:
    session.get.side_effect = requests.ConnectionError("boom")

    with pytest.raises(RemoteFetchError, match="boom"):
        repository.fetch_schema("0001")


def test_fetch_schema_returns_json_object(
    mocker: MockerFixture, session: typ.Any, repository: TemplateRepository
) -> None:
    session.get.return_value = _response(mocker, payload={"type": "object"})

    assert repository.fetch_schema("0001") == {"type": "object"}
    assert session.get.call_args.args[0] == f"{RAW}/templates/0001/schema.json"


@pytest.mark.parametrize("payload", [None, ["not", "an", "object"]])
def test_fetch_schema_rejects_non_object_payloads(
    mocker: MockerFixture,
    session: typ.Any,
    repository: TemplateRepository,
    payload: object,
) -> None:
    session.get.return_value = _response(mocker, payload=payload)

    with pytest.raises(RemoteFetchError, match="schema.json"):
        repository.fetch_schema("0001")


def test_list_template_files_filters_tree_and_sends_token(
    mocker: MockerFixture, session: typ.Any, repository: TemplateRepository
) -> None:
    session.get.return_value = _response(
        mocker,
        payload={
            "tree": [
                {"path": "templates/0001/pages/index.html", "type": "blob"},
                {"path": "templates/0001/pages", "type": "tree"},
                {"path": "templates/00010/pages/index.html", "type": "blob"},
                {"path": "templates/0002/pages/index.html", "type": "blob"},
                {"path": "README.md", "type": "blob"},
            ]
        },
    )

    files = repository.list_template_files("0001")

    assert files == ["templates/0001/pages/index.html"]
    assert session.get.call_args.args[0] == TREE_URL
    assert session.get.call_args.kwargs["params"] == {"recursive": "1"}
    headers = session.get.call_args.kwargs["headers"]
    assert headers["Authorization"] == "Bearer secret-token"


def test_download_template_materialises_tree(
    mocker: MockerFixture, session: typ.Any, repository: TemplateRepository, tmp_path: Path
) -> None:
    tree = _response(
        mocker,
        payload={
            "tree": [
                {"path": "templates/0001/pages/index.html", "type": "blob"},
                {"path": "templates/0001/pages/assets/css/site.css", "type": "blob"},
            ]
        },
    )
    files = {
        f"{RAW}/templates/0001/pages/index.html": b"<h1>{{ title }}</h1>",
        f"{RAW}/templates/0001/pages/assets/css/site.css": b"body {}",
    }

    def fake_get(url: str, **_: object) -> typ.Any:  # noqa: ANN401 - mock object
        if url == TREE_URL:
            return tree
        return _response(mocker, content=files[url])

    session.get.side_effect = fake_get

    root = repository.download_template("0001", tmp_path)

    assert root == tmp_path / "templates" / "0001"
    assert (root / "pages" / "index.html").read_bytes() == b"<h1>{{ title }}</h1>"
    assert (root / "pages" / "assets" / "css" / "site.css").read_bytes() == b"body {}"


def test_download_template_without_files_is_an_error(
    mocker: MockerFixture, session: typ.Any, repository: TemplateRepository, tmp_path: Path
) -> None:
    session.get.return_value = _response(mocker, payload={"tree": []})

    with pytest.raises(RemoteFetchError, match="No files found for template '0001'"):
        repository.download_template("0001", tmp_path)


def test_download_template_rejects_path_traversal(
    mocker: MockerFixture, session: typ.Any, repository: TemplateRepository, tmp_path: Path
) -> None:
    session.get.return_value = _response(
        mocker,
        payload={"tree": [{"path": "templates/0001/../../evil", "type": "blob"}]},
    )

    with pytest.raises(RemoteFetchError, match="unsafe"):
        repository.download_template("0001", tmp_path)


@pytest.mark.parametrize("template_id", ["", "../x", "a/b"])
def test_invalid_template_ids_are_rejected(
    repository: TemplateRepository, template_id: str
) -> None:
    with pytest.raises(RemoteFetchError, match="Invalid template id"):
        repository.config_url(template_id)
