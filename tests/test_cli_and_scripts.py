import sys, json, pathlib, subprocess
import pytest

from gridsync import cli
from conftest import table_rows

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]


def run(cmd, **kw):
    proc = subprocess.run(cmd, capture_output=True, text=True, **kw)
    assert proc.returncode == 0, f"Command failed: {cmd}\n{proc.stdout}\n{proc.stderr}"
    return proc


def test_cli_tables_and_show(users_db, capsys):
    assert cli.main(['tables', users_db]) == 0
    assert json.loads(capsys.readouterr().out)['tables'] == ['users']
    assert cli.main(['show', users_db, 'users']) == 0
    data = json.loads(capsys.readouterr().out)
    assert data['headers'] == ['id', 'name']
    assert data['rows'] == [['1', 'Ann'], ['2', 'Bo']]


def test_cli_commit_from_csv(users_db, tmp_path, capsys):
    csv_path = tmp_path / 'users.csv'
    csv_path.write_text('id,name\n1,Anna\n2,Bo\n3,Cy\n', encoding='utf-8')
    assert cli.main(['commit', users_db, 'users', str(csv_path)]) == 0
    assert json.loads(capsys.readouterr().out)['rows_written'] == 3
    assert table_rows(users_db, 'users') == [(1, 'Anna'), (2, 'Bo'), (3, 'Cy')]


def test_cli_failure_exit_code(users_db, tmp_path, capsys):
    assert cli.main(['show', users_db, 'nope']) == 1
    assert json.loads(capsys.readouterr().out)['kind'] == 'SchemaUnavailable'
    assert cli.main(['tables', str(tmp_path / 'missing.db')]) == 1
    assert json.loads(capsys.readouterr().out)['kind'] == 'OpenFailed'


def test_cli_usage_error():
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 2


def test_cli_module_export_and_health(users_db, tmp_path):
    out = tmp_path / 'exports'
    proc = run([sys.executable, '-m', 'gridsync.cli', 'export', users_db, 'users', '--out', str(out)],
               cwd=PROJECT_ROOT)
    data = json.loads(proc.stdout)
    assert data['success'] is True
    assert pathlib.Path(data['csv']).exists() and pathlib.Path(data['html']).exists()
    proc = run([sys.executable, '-m', 'gridsync.cli', 'health', users_db], cwd=PROJECT_ROOT)
    assert json.loads(proc.stdout)['ok'] is True


def test_smoke_script_roundtrip(users_db, monkeypatch):
    monkeypatch.setenv('GRIDSYNC_DB', users_db)
    monkeypatch.setenv('SMOKE_ROUNDTRIP', '1')
    before = table_rows(users_db, 'users')
    result = run([sys.executable, 'scripts/smoke_test.py'], cwd=PROJECT_ROOT, timeout=30)
    data = json.loads(result.stdout.strip().splitlines()[-1])
    assert data == {'success': True, 'tables': {'users': 2}}
    assert table_rows(users_db, 'users') == before


def test_smoke_script_missing_db(tmp_path, monkeypatch):
    monkeypatch.setenv('GRIDSYNC_DB', str(tmp_path / 'nope.db'))
    proc = subprocess.run([sys.executable, 'scripts/smoke_test.py'], capture_output=True, text=True,
                          cwd=PROJECT_ROOT, timeout=30)
    assert proc.returncode == 1
    assert json.loads(proc.stdout)['success'] is False
