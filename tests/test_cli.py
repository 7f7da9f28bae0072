"""Tests for inplace_adjoint.cli module."""

from __future__ import annotations

import io

import pytest

from inplace_adjoint.cli import main


@pytest.fixture
def block_file(tmp_path):
    path = tmp_path / "block.py"
    path.write_text("def f1():\n    a[i, i] = val\n    c[i] = np.sin(val)\n", encoding="utf-8")
    return path


class TestMain:
    """Tests for main."""

    def test_generates_definitions(self, block_file, capsys):
        assert main([str(block_file), "--vars", "a,b,c,val,i", "--const", "i"]) == 0
        out = capsys.readouterr().out
        assert "def f1_(a, c, val, i):" in out
        assert "Const(i)," in out
        assert "return (dz_a, dz_c, dz_val, 0.0)" in out

    def test_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("a[0] = b\n"))
        assert main(["-", "--vars", "a,b", "--name", "f2"]) == 0
        assert "def f2(a, b):" in capsys.readouterr().out

    def test_bare_statements_need_name(self, tmp_path, capsys):
        path = tmp_path / "block.py"
        path.write_text("a[0] = b\n", encoding="utf-8")
        assert main([str(path), "--vars", "a,b"]) == 2
        assert "function_name" in capsys.readouterr().err

    def test_no_mutation(self, tmp_path, capsys):
        path = tmp_path / "block.py"
        path.write_text("tmp = a[0]\n", encoding="utf-8")
        assert main([str(path), "--vars", "a", "--name", "f1"]) == 2
        assert "no visible variable" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.py"), "--vars", "a"]) == 2
        assert "missing.py" in capsys.readouterr().err

    def test_invalid_log_level(self, block_file, capsys):
        assert main([str(block_file), "--vars", "a", "--log-level", "LOUD"]) == 2
        assert "invalid settings" in capsys.readouterr().err

    def test_invalid_variable_name(self, block_file):
        with pytest.raises(SystemExit) as info:
            main([str(block_file), "--vars", "a,not valid"])
        assert info.value.code == 2
