from homealign_console.app.ui.listing_view import EMPTY_VALUE, ColumnDef, display_value, row_cells
from homealign_console.app.ui.table_printer import print_table

COLUMNS = (ColumnDef("name", "Name"), ColumnDef("status", "Status"), ColumnDef("ssn_last4", "SSN"))


def test_row_cells_normalize_and_mask_values() -> None:
    cells = row_cells({"name": "  Dr. " + "x" * 40, "status": "inactive", "ssn_last4": "1234"}, COLUMNS)

    assert cells[0].endswith("…") and len(cells[0]) == 32
    assert cells[1] == "INACTIVE"
    assert cells[2] == EMPTY_VALUE
    assert display_value(True) == "Yes"
    assert display_value("   ") == EMPTY_VALUE


def test_print_table_marks_selected_rows() -> None:
    lines: list[str] = []

    print_table(
        "Providers",
        [{"name": "Grey", "status": "active"}, {"name": "Shepherd", "status": None}],
        COLUMNS,
        row_ids=["7", "8"],
        selected={"8"},
        output=lines.append,
    )

    assert lines[0] == "\nProviders"
    assert lines[1].split(" | ")[1:3] == ["id", "Name    "]
    assert lines[3].startswith("[ ] | 7 ")
    assert lines[4].startswith("[x] | 8 ")
    assert f"| {EMPTY_VALUE}" in lines[4]


def test_print_table_shows_empty_message() -> None:
    lines: list[str] = []

    print_table("Clients", [], COLUMNS, empty_message="No records found", output=lines.append)

    assert lines == ["\nClients", "No records found"]
