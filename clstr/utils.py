import enum
import gzip
import re
from typing import TextIO, Iterable, Iterator, NamedTuple, Optional, Tuple

# plain ASCII numerals only: no sign, whitespace, underscores, nan or inf
DIGITS = re.compile(r"[0-9]+")
DECIMAL = re.compile(r"[0-9]+(\.[0-9]*)?|\.[0-9]+")


class ClstrError(Exception):
    """Base class for .clstr parsing errors."""


class RecordError(ClstrError):
    """A sequence line that does not have the expected shape."""

    def __init__(self, message: str, line: str):
        super().__init__(f"{message}: {line}")
        self.line = line


class LengthError(RecordError):
    pass


class IdentityError(RecordError):
    pass


class Sequence(NamedTuple):
    length: int
    id: str
    identity: Optional[float]
    is_representative: bool


class Cluster(NamedTuple):
    cluster_id: int
    sequences: Tuple[Sequence, ...]

    def size(self) -> int:
        return len(self.sequences)

    def representative(self) -> Optional[Sequence]:
        for seq in self.sequences:
            if seq.is_representative:
                return seq
        return None


def parse_sequence_line(line: str) -> Sequence:
    """
    Parse one member line of a cluster, e.g.

        0    4481aa, >sp|P0C6T5|R1A_BCHK5... at 99.89%

    Each field is extracted on its own, so a bad line reports which part
    of it was wrong.
    """
    parts = line.split()
    if len(parts) < 3:
        raise RecordError("Invalid sequence line", line)

    if not parts[1].endswith("aa,"):
        raise RecordError("Invalid length format", line)
    digits = parts[1][:-3]
    try:
        length = int(digits)
    except ValueError as err:
        raise LengthError(f"parsing integer error - {err}", line) from err
    if not DIGITS.fullmatch(digits):
        raise LengthError(f"parsing integer error - invalid digit in {digits!r}", line)

    name = parts[2]
    if name.startswith(">"):
        name = name[1:]
    seq_id, sep, _ = name.partition("...")
    if not sep or not seq_id:
        raise RecordError("Invalid ID format", line)

    is_rep = line.endswith("*")

    identity = None
    pos = line.find(" at ")
    if pos != -1:
        value = line[pos + 4:]
        if is_rep:
            value = value[:-1].rstrip()
        value = value.rstrip("%")
        try:
            identity = float(value)
        except ValueError as err:
            raise IdentityError(f"parsing float error - {err}", line) from err
        if not DECIMAL.fullmatch(value):
            raise IdentityError(f"parsing float error - invalid float literal {value!r}", line)

    return Sequence(length, seq_id, identity, is_rep)


class State(enum.Enum):
    NO_CLUSTER = 0
    ACCUMULATING = 1


class ClstrParser:
    """
    Turn the lines of a .clstr file into Cluster records, one at a time.

    Clusters are numbered 0, 1, 2, ... in the order their headers appear;
    the number printed in the header is ignored. Lines before the first
    header are skipped. The parser can be driven line by line with feed()
    and finish(), or iterated over when built with a file handle.
    """

    def __init__(self, input_handle: Optional[Iterable] = None):
        self._lines = iter(input_handle) if input_handle is not None else iter(())
        self.state = State.NO_CLUSTER
        self.cluster_id = -1
        self.sequences = []

    def _seal(self) -> Cluster:
        return Cluster(self.cluster_id, tuple(self.sequences))

    def feed(self, line) -> Optional[Cluster]:
        """Consume one line. Returns the cluster closed by a header line, if any."""
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError as err:
                raise RecordError("Invalid encoding", repr(line)) from err
        line = line.rstrip("\n")
        if line.endswith("\r"):
            line = line[:-1]

        if line.startswith(">"):
            done = self._seal() if self.state is State.ACCUMULATING else None
            self.state = State.ACCUMULATING
            self.cluster_id += 1
            self.sequences = []
            return done

        if self.state is State.ACCUMULATING:
            self.sequences.append(parse_sequence_line(line))
        return None

    def finish(self) -> Optional[Cluster]:
        """Signal end of input. Returns the pending cluster exactly once."""
        if self.state is State.NO_CLUSTER:
            return None
        done = self._seal()
        self.state = State.NO_CLUSTER
        self.sequences = []
        return done

    def __iter__(self) -> Iterator[Cluster]:
        return self

    def __next__(self) -> Cluster:
        try:
            for line in self._lines:
                cluster = self.feed(line)
                if cluster is not None:
                    return cluster
        except UnicodeDecodeError as err:
            # raised by text-mode handles while reading ahead
            raise ClstrError(f"Invalid encoding - {err}") from err
        cluster = self.finish()
        if cluster is None:
            raise StopIteration
        return cluster


def clstr_iter(input_handle: TextIO) -> Iterator[Cluster]:
    """
    Given a file handle, iterate over the clusters in a .clstr file.
    """
    yield from ClstrParser(input_handle)


def parse_clstr(filename: str) -> Iterator[Cluster]:
    """
    Iterate over the clusters of a .clstr file on disk. The file is closed
    once the clusters are exhausted.
    """
    with open(filename, "r", encoding="utf-8") as f:
        yield from ClstrParser(f)


def read_clusters(input_handle: TextIO) -> list[Cluster]:
    """
    Read every cluster into memory, in file order.
    """
    return list(clstr_iter(input_handle))


def format_sequence(index: int, seq: Sequence) -> str:
    line = f"{index}    {seq.length}aa, >{seq.id}..."
    if seq.identity is not None:
        line += f" at {seq.identity:.2f}%"
    if seq.is_representative:
        line += " *"
    return line + "\n"


def format_cluster(cluster: Cluster) -> str:
    """
    Render a cluster in .clstr form. Members are numbered by their position
    in the cluster and identities are printed with two decimals.
    """
    lines = [f">Cluster {cluster.cluster_id}\n"]
    for index, seq in enumerate(cluster.sequences):
        lines.append(format_sequence(index, seq))
    return "".join(lines)


class ClstrWriter:
    def __init__(self, output_handle: TextIO):
        self.output_handle = output_handle

    def write_cluster(self, cluster: Cluster):
        self.output_handle.write(format_cluster(cluster))

    def write_clusters(self, clusters: Iterable[Cluster]):
        for cluster in clusters:
            self.write_cluster(cluster)


def write_clstr(filename: str, clusters: Iterable[Cluster]):
    """
    Write clusters to a .clstr file.
    """
    with open(filename, "w", encoding="utf-8") as f:
        ClstrWriter(f).write_clusters(clusters)


def open_text(filename: str) -> TextIO:
    """
    Open a file for reading as UTF-8 text, decompressing it if the name
    ends in .gz.
    """
    if str(filename).endswith(".gz"):
        return gzip.open(filename, "rt", encoding="utf-8")
    return open(filename, "r", encoding="utf-8")


class FastaRecord(NamedTuple):
    id: str
    description: str
    sequence: str


def fasta_iter(input_handle: TextIO) -> Iterator[FastaRecord]:
    """
    Iterate over the records of a fasta handle. The ID is the header up to
    the first whitespace and the description whatever follows it, possibly
    empty. Sequence lines are joined with no newlines.
    """
    seq_id = description = None
    chunks = []

    for line in input_handle:
        line = line.strip()
        if not line:
            continue
        if not line.startswith(">"):
            chunks.append(line)
            continue
        if seq_id is not None:
            yield FastaRecord(seq_id, description, "".join(chunks))
        fields = line[1:].split(None, 1)
        seq_id = fields[0] if fields else ""
        description = fields[1] if len(fields) > 1 else ""
        chunks = []

    if seq_id is not None:
        yield FastaRecord(seq_id, description, "".join(chunks))


def read_fasta(filename: str) -> list[FastaRecord]:
    """
    Read all records from a fasta file, gzipped or not.
    """
    with open_text(filename) as f:
        return list(fasta_iter(f))


def fasta_index(filename: str) -> dict[str, Tuple[str, str]]:
    """
    Map each sequence ID in a fasta file to its (description, sequence).
    Records with an empty header are left out.
    """
    return {rec.id: (rec.description, rec.sequence)
            for rec in read_fasta(filename) if rec.id}


def write_fasta(output_handle: TextIO, records: Iterable[Tuple[str, str]]):
    """
    Write (header, sequence) pairs to an open handle, one sequence line each.
    """
    for header, sequence in records:
        output_handle.write(f">{header}\n{sequence}\n")
