from lifejournal.keytool import main
from lifejournal.keys import KeyProvider

def test_generate(capsys):
    assert main(["generate"]) == 0
    key = capsys.readouterr().out.strip()
    assert len(KeyProvider(key).get_master_key()) == 32

def test_check_valid_key(capsys):
    assert main(["check", "--key", "ab" * 32]) == 0
    assert "VALID" in capsys.readouterr().out

def test_check_invalid_key(capsys):
    assert main(["check", "--key", "ab" * 31]) == 1
    assert "Got 62 characters" in capsys.readouterr().err

def test_check_reads_env(monkeypatch, capsys):
    monkeypatch.delenv("ENCRYPTION_MASTER_KEY", raising=False)
    assert main(["check"]) == 1
    assert "is not set" in capsys.readouterr().err
