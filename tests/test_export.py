from explorer.core.schemas import ResultSet
from explorer.core.session.export import export_filename, serialize


def test_serialize_tab_separated():
    result = ResultSet(columns=("n", "team"), rows=((3, "KC"), (1, "SF")))

    assert serialize(result) == "n\tteam\n3\tKC\n1\tSF"


def test_nulls_and_booleans():
    result = ResultSet(columns=("a", "b", "c"), rows=((None, True, 1.5),))

    assert serialize(result) == "a\tb\tc\n\ttrue\t1.5"
    assert serialize(result, null_sentinel="NULL") == "a\tb\tc\nNULL\ttrue\t1.5"


def test_header_only_for_empty_result():
    result = ResultSet(columns=("abbr", "name"))

    assert serialize(result, ",", "\r\n") == "abbr,name"


def test_separators_are_not_escaped():
    result = ResultSet(columns=("note",), rows=(("a,b",),))

    assert serialize(result, ",", "\n") == "note\na,b"


def test_split_reconstructs_result():
    """Splitting the output by the same separators gives back the table"""
    result = ResultSet(
        columns=("formation", "sacks"),
        rows=(("SHOTGUN", 12), ("PISTOL", 3), ("UNDER CENTER", 0)),
    )

    text = serialize(result, "\t", "\n")
    lines = [line.split("\t") for line in text.split("\n")]

    assert tuple(lines[0]) == result.columns
    assert lines[1:] == [[str(cell) for cell in row] for row in result.rows]
    assert serialize(result, "\t", "\n") == text


def test_export_filename():
    assert export_filename("results") == "results.tsv"
    assert export_filename("results", "comma") == "results.csv"
