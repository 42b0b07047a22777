from gridsync.grid import Grid, cell_text


def test_width_covers_headers_and_longest_row():
    assert Grid().width == 0
    assert Grid(headers=['a'], rows=[['1', '2', '3']]).width == 3
    assert Grid(headers=['a', 'b', 'c'], rows=[['1']]).width == 3


def test_edit_helpers():
    grid = Grid(headers=['id', 'name'], rows=[['1', 'Ann']])
    grid.set_cell(0, 3, 'x')
    assert grid.rows[0] == ['1', 'Ann', '', 'x']
    idx = grid.append_row()
    assert grid.rows[idx] == ['', '', '', '']
    assert grid.remove_row(0) == ['1', 'Ann', '', 'x']
    assert grid.row_count == 1


def test_copy_is_independent():
    grid = Grid(headers=['id'], rows=[['1']])
    snap = grid.copy()
    grid.set_cell(0, 0, '2')
    assert snap.rows == [['1']]


def test_cell_text():
    assert cell_text(None) is None
    assert cell_text(3) == '3'
    assert cell_text(b'\xff') == '�'
