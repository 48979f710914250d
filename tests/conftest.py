from PIL import Image, ImageDraw
import pytest


def cell_marker(row, col):
    return (40 + row * 30, 200 - col * 30, 60, 255)


def make_sheet(rows, cols, cell=(10, 10), background=(255, 255, 255, 255)):
    """Sheet whose cell (row, col) holds a centred block of ``cell_marker(row, col)``."""

    cell_w, cell_h = cell
    sheet = Image.new("RGBA", (cols * cell_w, rows * cell_h), background)
    draw = ImageDraw.Draw(sheet)
    for row in range(rows):
        for col in range(cols):
            left, top = col * cell_w, row * cell_h
            draw.rectangle(
                (left + cell_w // 4, top + cell_h // 4, left + cell_w - cell_w // 4 - 1, top + cell_h - cell_h // 4 - 1),
                fill=cell_marker(row, col),
            )
    return sheet


@pytest.fixture
def sheet_factory():
    return make_sheet


@pytest.fixture
def marker():
    return cell_marker


@pytest.fixture
def sheet_2x2():
    return make_sheet(2, 2, cell=(200, 200))


@pytest.fixture
def small_sheet():
    return make_sheet(2, 3, cell=(8, 6))
