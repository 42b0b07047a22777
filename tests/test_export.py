from datetime import datetime

from gridsync.export import export_grid, grid_to_csv, grid_to_html, read_csv, write_csv
from gridsync.grid import Grid

STAMP = datetime(2024, 5, 1, 13, 45, 9)


def test_html_document_escapes_and_labels():
    grid = Grid(headers=['id', None], rows=[['1', '<b>Ann</b> & co']])
    doc = grid_to_html(grid, 'users', STAMP)
    assert '<h1>Table: users</h1>' in doc
    assert '<th>Column_2</th>' in doc
    assert '&lt;b&gt;Ann&lt;/b&gt; &amp; co' in doc
    assert 'Exported on 2024-05-01 13:45:09 | Total rows: 1' in doc


def test_csv_has_bom_and_quotes(tmp_path):
    grid = Grid(headers=['id', 'note'], rows=[['1', 'a, "b"\nc'], ['2']])
    path = write_csv(grid, tmp_path / 'out.csv')
    raw = path.read_bytes()
    assert raw.startswith(b'\xef\xbb\xbf')
    assert raw.endswith(b'2,\n')
    back = read_csv(path)
    assert back.headers == ['id', 'note']
    assert back.rows == [['1', 'a, "b"\nc'], ['2', '']]


def test_null_cells_export_as_empty_text(tmp_path):
    grid = Grid(headers=['id', 'v'], rows=[['1', None]])
    assert grid_to_csv(grid) == 'id,v\n1,\n'
    assert '<td>1</td><td></td>' in grid_to_html(grid, 'n', STAMP)


def test_read_empty_csv(tmp_path):
    path = tmp_path / 'empty.csv'
    path.write_text('', encoding='utf-8')
    grid = read_csv(path)
    assert grid.headers == [] and grid.rows == []


def test_export_grid_writes_both_files(tmp_path):
    grid = Grid(headers=['id', 'name'], rows=[['1', 'Ann']])
    out = tmp_path / 'exports' / 'nested'
    res = export_grid(grid, 'users', out, now=STAMP)
    assert res['success']
    assert res['html'].endswith('users_2024-05-01_13-45-09.html')
    assert res['csv'].endswith('users_2024-05-01_13-45-09.csv')
    assert (out / 'users_2024-05-01_13-45-09.html').read_text(encoding='utf-8').startswith('<!DOCTYPE html>')


def test_export_refuses_empty_grid(tmp_path):
    res = export_grid(Grid(headers=['id']), 'users', tmp_path)
    assert not res['success']
    assert 'no table data' in res['error'].lower()
    assert list(tmp_path.iterdir()) == []


def test_export_after_load_does_not_touch_storage(engine, users_db, tmp_path):
    from conftest import table_rows
    grid = engine.load_table('users')['grid']
    assert export_grid(grid, 'users', tmp_path)['success']
    assert table_rows(users_db, 'users') == [(1, 'Ann'), (2, 'Bo')]
