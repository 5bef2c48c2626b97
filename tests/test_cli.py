import json

import pytest

from atlas.cli import Session, _apply_overrides, _parse_args, handle, main
from atlas.config import Settings
from atlas.directory import Directory
from atlas.favorites import FavoritesStore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ("ATLAS_CATALOG_URL", "ATLAS_CATALOG_FILE", "ATLAS_HDI_PATH",
                 "ATLAS_FAVORITES_PATH", "ATLAS_HTTP_TIMEOUT", "ATLAS_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    # keep a stray .env in the working directory out of the picture
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def files(tmp_path, raw_record, sample_hdi_text):
    catalog = tmp_path / "countries.json"
    catalog.write_text(json.dumps([raw_record("France"), raw_record("Norway", region="Europe")]),
                       encoding="utf-8")
    hdi = tmp_path / "hdi.csv"
    hdi.write_text(sample_hdi_text, encoding="utf-8")
    return ["--catalog-file", str(catalog), "--hdi", str(hdi),
            "--favorites", str(tmp_path / "favorites.json")]


def test_query_mode_success(files, capsys):
    assert main(files + ["--query", "q=fra"]) == 0
    out = capsys.readouterr().out
    assert "France" in out
    assert "Page 1/1" in out


def test_query_mode_non_normal_outcome(files, capsys):
    assert main(files + ["--query", "q=zzz"]) == 2
    assert "No Results Found" in capsys.readouterr().out


def test_query_mode_invalid_parameter(files, capsys):
    assert main(files + ["--query", "?foo=bar"]) == 2
    assert "invalid parameter: 'foo'" in capsys.readouterr().out


def test_missing_catalog_file_fails_startup(tmp_path, capsys):
    code = main(["--catalog-file", str(tmp_path / "missing.json"), "--hdi", "",
                 "--favorites", str(tmp_path / "favorites.json"), "--query", "q=x"])
    assert code == 1
    assert "Error:" in capsys.readouterr().err


# ---------------- REPL commands ----------------
@pytest.fixture
def session(make_country, tmp_path):
    countries = [make_country(f"Country {i:02d}", "Europe") for i in range(1, 15)]
    countries.append(make_country("Peru", "Americas", "Lima"))
    store = FavoritesStore(tmp_path / "favorites.json")
    return Session(directory=Directory(countries, store))


def test_query_then_page(session, capsys):
    handle(session, 'query "region=Europe"')
    assert "Page 1/2 (14 countries)" in capsys.readouterr().out
    handle(session, "page 2")
    out = capsys.readouterr().out
    assert "Page 2/2" in out
    assert "Country 14" in out


def test_page_before_query(session, capsys):
    handle(session, "page 2")
    assert "No query yet" in capsys.readouterr().out


def test_fav_add_and_list(session, capsys, tmp_path):
    handle(session, 'fav add "Peru"')
    assert "Added Peru." in capsys.readouterr().out
    handle(session, 'fav add "Peru"')
    assert "Nothing changed." in capsys.readouterr().out
    handle(session, "favorites")
    assert "Peru" in capsys.readouterr().out
    assert json.loads((tmp_path / "favorites.json").read_text(encoding="utf-8")) == {"countries": ["Peru"]}


def test_fav_unknown_action(session):
    with pytest.raises(ValueError):
        handle(session, 'fav toggle "Peru"')


def test_show(session, capsys):
    handle(session, 'show "peru"')
    out = capsys.readouterr().out
    assert "Capital: Lima" in out
    assert "HDI: no data" in out


def test_export_last_result(session, tmp_path, capsys):
    handle(session, "query q=peru")
    capsys.readouterr()
    out_file = tmp_path / "result.json"
    handle(session, f'export json "{out_file}"')
    assert "Exported 1 countries" in capsys.readouterr().out
    assert [c["name"] for c in json.loads(out_file.read_text(encoding="utf-8"))] == ["Peru"]


def test_unknown_command(session, capsys):
    handle(session, "dance")
    assert "Unknown command" in capsys.readouterr().out


@pytest.mark.parametrize("query", ["foo", 'q="open'])
def test_query_mode_malformed_parameters(files, capsys, query):
    assert main(files + ["--query", query]) == 2
    assert "Error:" in capsys.readouterr().err


def test_empty_hdi_flag_disables_hdi(files, caplog):
    assert _apply_overrides(Settings(), _parse_args(["--hdi", ""])).hdi_path == ""
    assert main(files + ["--hdi", "", "--query", "q=fra"]) == 0
    assert "No HDI source configured" in caplog.text


def test_empty_favorites_flag_keeps_favorites_in_memory(files, tmp_path):
    assert main(files + ["--favorites", "", "--query", "q=fra"]) == 0
    assert not (tmp_path / "favorites.json").exists()
