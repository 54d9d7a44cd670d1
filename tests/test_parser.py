import io

import pytest

from clstr.utils import (
    ClstrError, ClstrParser, Cluster, IdentityError, LengthError, RecordError, Sequence,
    clstr_iter, parse_clstr, parse_sequence_line, read_clusters,
)

TEST_SNIPPET = """>Cluster 0
0    4481aa, >sp|P0C6T5|R1A_BCHK5... at 99.89%
1    7126aa, >sp|P0C6W1|R1AB_BC133... at 66.94%
2    7119aa, >sp|P0C6W3|R1AB_BCHK4... at 67.17%
3    7182aa, >sp|P0C6W4|R1AB_BCHK5... *
4    307aa, >sp|Q9WQ77|R1AB_CVRSD... at 76.22%
>Cluster 1
0    4471aa, >sp|P0C6U3|R1A_CVHN1... at 99.91%
1    4441aa, >sp|P0C6U4|R1A_CVHN2... at 81.47%
2    4421aa, >sp|P0C6U5|R1A_CVHN5... at 81.52%
"""


def test_parse_clusters():
    parser = ClstrParser(io.StringIO(TEST_SNIPPET))

    cluster0 = next(parser)
    assert cluster0.cluster_id == 0
    assert cluster0.size() == 5
    assert cluster0.sequences[0].id == "sp|P0C6T5|R1A_BCHK5"
    assert cluster0.sequences[0].identity == pytest.approx(99.89)
    assert not cluster0.sequences[0].is_representative

    assert cluster0.sequences[3].id == "sp|P0C6W4|R1AB_BCHK5"
    assert cluster0.sequences[3].is_representative
    assert cluster0.sequences[3].identity is None
    assert cluster0.representative() == cluster0.sequences[3]

    cluster1 = next(parser)
    assert cluster1.cluster_id == 1
    assert cluster1.size() == 3
    assert cluster1.sequences[0].identity == pytest.approx(99.91)
    assert cluster1.representative() is None

    with pytest.raises(StopIteration):
        next(parser)


def test_two_cluster_example():
    data = ">Cluster 0\n0    100aa, >seqA... at 95.00%\n1    100aa, >seqB... *\n>Cluster 1\n0    50aa, >seqC... *\n"
    clusters = read_clusters(io.StringIO(data))

    assert clusters == [
        Cluster(0, (Sequence(100, "seqA", 95.0, False), Sequence(100, "seqB", None, True))),
        Cluster(1, (Sequence(50, "seqC", None, True),)),
    ]


def test_header_numbers_are_ignored():
    data = ">Cluster 7\n0    10aa, >a... *\n>Cluster 3\n0    10aa, >b... *\n>Clstr 99\n0    10aa, >c... *\n"
    ids = [c.cluster_id for c in clstr_iter(io.StringIO(data))]
    assert ids == [0, 1, 2]


def test_empty_and_headerless_input():
    assert read_clusters(io.StringIO("")) == []
    assert read_clusters(io.StringIO("some preamble\nmore\n")) == []


def test_stray_lines_before_first_header_are_dropped():
    data = "not a record\n>Cluster 0\n0    10aa, >a... *\n"
    clusters = read_clusters(io.StringIO(data))
    assert len(clusters) == 1
    assert clusters[0].sequences[0].id == "a"


def test_empty_clusters_are_emitted():
    data = ">Cluster 0\n>Cluster 1\n0    10aa, >a... *\n>Cluster 2\n"
    clusters = read_clusters(io.StringIO(data))
    assert [c.size() for c in clusters] == [0, 1, 0]
    assert [c.cluster_id for c in clusters] == [0, 1, 2]


def test_bytes_and_crlf_lines():
    data = b">Cluster 0\r\n0    10aa, >a... at 90.50%\r\n1    12aa, >b... *\r\n"
    cluster, = read_clusters(io.BytesIO(data))
    assert cluster.sequences[0].identity == pytest.approx(90.5)
    assert cluster.sequences[1].is_representative


def test_feed_and_finish_without_stream():
    parser = ClstrParser()
    assert parser.feed(">Cluster 0") is None
    assert parser.feed("0    10aa, >a... *") is None
    done = parser.feed(">Cluster 1")
    assert done == Cluster(0, (Sequence(10, "a", None, True),))
    assert parser.finish() == Cluster(1, ())
    assert parser.finish() is None


def test_iteration_resumes_on_live_stream():
    handle = io.StringIO(TEST_SNIPPET)
    parser = ClstrParser(handle)
    first = next(parser)
    rest = list(parser)
    assert first.cluster_id == 0
    assert [c.cluster_id for c in rest] == [1]
    assert list(parser) == []


def test_parse_error_aborts():
    data = ">Cluster 0\n0    10aa, >a... *\nbroken\n0    10aa, >b... *\n"
    with pytest.raises(RecordError):
        read_clusters(io.StringIO(data))


def test_parse_clstr_from_path(tmp_path):
    path = tmp_path / "test.clstr"
    path.write_text(TEST_SNIPPET)
    assert [c.size() for c in parse_clstr(path)] == [5, 3]


def test_sequence_line_fields():
    seq = parse_sequence_line("12    340aa, >my.seq.v2... at 87.5%")
    assert seq == Sequence(340, "my.seq.v2", 87.5, False)

    seq = parse_sequence_line("0\t50aa, >rep... *")
    assert seq == Sequence(50, "rep", None, True)


def test_identity_and_representative_together():
    seq = parse_sequence_line("0    50aa, >odd... at 99.00% *")
    assert seq.is_representative
    assert seq.identity == pytest.approx(99.0)


@pytest.mark.parametrize("line, message", [
    ("0    100aa,", "Invalid sequence line"),
    ("", "Invalid sequence line"),
    ("0    100nt, >seq... *", "Invalid length format"),
    ("0    100aa, >seq *", "Invalid ID format"),
    ("0    100aa, >... *", "Invalid ID format"),
])
def test_malformed_records(line, message):
    with pytest.raises(RecordError) as excinfo:
        parse_sequence_line(line)
    assert message in str(excinfo.value)
    assert excinfo.value.line == line


@pytest.mark.parametrize("line", [
    "0    xyzaa, >seq... *",
    "0    -5aa, >seq... *",
    "0    aa, >seq... *",
])
def test_bad_length(line):
    with pytest.raises(LengthError) as excinfo:
        parse_sequence_line(line)
    assert excinfo.value.line == line


def test_bad_identity():
    with pytest.raises(IdentityError) as excinfo:
        parse_sequence_line("1    100aa, >seq... at +/95.00%")
    assert isinstance(excinfo.value.__cause__, ValueError)


@pytest.mark.parametrize("line", [
    "0    9_5aa, >seq... *",
    "0    ٥aa, >seq... *",
    "1    100aa, >seq... at nan%",
    "1    100aa, >seq... at 9_5%",
    "1    100aa, >seq... at  95%",
    "1    100aa, >seq... at inf%",
    "1    100aa, >seq... at 1e2%",
])
def test_numbers_must_be_plain_decimals(line):
    with pytest.raises((LengthError, IdentityError)):
        parse_sequence_line(line)


def test_invalid_utf8_bytes():
    data = b">Cluster 0\n0    10aa, >a\xff... *\n"
    with pytest.raises(RecordError) as excinfo:
        read_clusters(io.BytesIO(data))
    assert "Invalid encoding" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)


def test_invalid_utf8_file(tmp_path):
    path = tmp_path / "bad.clstr"
    path.write_bytes(b">Cluster 0\n0    10aa, >a\xff... *\n")
    with pytest.raises(ClstrError) as excinfo:
        list(parse_clstr(path))
    assert "Invalid encoding" in str(excinfo.value)
