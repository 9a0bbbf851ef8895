import pytest

from patient_education.cli import build_parser, main


@pytest.fixture(autouse=True)
def log_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("PATIENT_EDUCATION_LOG_DIR", str(tmp_path / "logs"))


def test_export_requires_ids():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["export", "heart"])


def test_list_prints_catalog(local_origin, capsys):
    assert main(["--content-root", str(local_origin), "list"]) == 0

    out = capsys.readouterr().out
    assert "heart  Heart" in out
    assert "  angina  Angina" in out
    assert "[PDF] Diet" in out
    assert "[AUDIO] Inhaler guide" in out
    assert "banner b1  Flu shots" in out


def test_export_writes_document(local_origin, temp_dir, capsys):
    out_dir = temp_dir / "exports"

    code = main(["--content-root", str(local_origin), "export", "heart", "angina", "-o", str(out_dir)])

    assert code == 0
    assert (out_dir / "Angina.docx").exists()
    assert str(out_dir / "Angina.docx") in capsys.readouterr().out


def test_export_unknown_disease_fails(local_origin, temp_dir, capsys):
    code = main(["--content-root", str(local_origin), "export", "heart", "gout", "-o", str(temp_dir)])

    assert code == 1
    assert "Unknown disease heart/gout" in capsys.readouterr().err


def test_missing_fragment_fails_load(local_origin, capsys):
    (local_origin / "lungs" / "asthma" / "description.txt").unlink()

    assert main(["--content-root", str(local_origin), "list"]) == 1
    assert "Could not load catalog" in capsys.readouterr().err
