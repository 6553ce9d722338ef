from typing import Dict

from explorer.core.schemas import Cell, ResultSet

# Separator name -> (column separator, file extension)
SEPARATORS: Dict[str, tuple] = {
    "tab": ("\t", "tsv"),
    "comma": (",", "csv"),
}


def cell_text(value: Cell, null_sentinel: str = "") -> str:
    if value is None:
        return null_sentinel
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def serialize(
    result: ResultSet,
    column_separator: str = "\t",
    row_separator: str = "\n",
    null_sentinel: str = "",
) -> str:
    """
    Flatten a result set into delimited text.

    First line holds the column names, then one line per row. Cell text is
    written as-is: separators inside cells are NOT escaped or quoted, and there
    is no trailing row separator.

    Example:
        columns=("n", "team"), rows=((3, "KC"), (None, "SF"))
            -> "n\\tteam\\n3\\tKC\\n\\tSF"
    """
    lines = [column_separator.join(result.columns)]
    for row in result.rows:
        lines.append(
            column_separator.join(cell_text(value, null_sentinel) for value in row)
        )
    return row_separator.join(lines)


def export_filename(stem: str, separator: str = "tab") -> str:
    _, extension = SEPARATORS[separator]
    return f"{stem}.{extension}"
