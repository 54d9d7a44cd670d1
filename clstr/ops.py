import sys
from typing import Iterable, Iterator, Mapping, NamedTuple, Tuple

from clstr.utils import Cluster

Lookup = Mapping[str, Tuple[str, str]]


class ClusterStats(NamedTuple):
    cluster_count: int
    sequence_count: int
    mean_size: float


def top_n(clusters: Iterable[Cluster], n: int) -> list[Cluster]:
    """
    The n largest clusters, largest first. Clusters of equal size keep
    their file order.
    """
    if n < 0:
        raise ValueError(f"cluster number must be non-negative, got {n}")
    ordered = sorted(clusters, key=lambda c: c.size(), reverse=True)
    return ordered[:n]


def filter_by_size(clusters: Iterable[Cluster], min_size: int) -> Iterator[Cluster]:
    for cluster in clusters:
        if cluster.size() >= min_size:
            yield cluster


def cluster_table(clusters: Iterable[Cluster]) -> Iterator[Tuple[int, int]]:
    for cluster in clusters:
        yield cluster.cluster_id, cluster.size()


def cluster_stats(clusters: Iterable[Cluster]) -> ClusterStats:
    cluster_count = 0
    sequence_count = 0
    for cluster in clusters:
        cluster_count += 1
        sequence_count += cluster.size()
    mean_size = sequence_count / cluster_count if cluster_count else 0.0
    return ClusterStats(cluster_count, sequence_count, mean_size)


def format_number(f):
    return int(f) if f == int(f) else f


def cluster_fasta_name(cluster: Cluster, lookup: Lookup) -> str:
    """
    Label for a cluster's fasta file, taken from the description of its
    representative sequence.
    """
    rep = cluster.representative()
    if rep is None:
        return "No representative"
    entry = lookup.get(rep.id)
    description = entry[0] if entry is not None else "no-description"
    return description.replace(" ", "_").replace("/", "_")


def cluster_fasta_records(cluster: Cluster, lookup: Lookup) -> Iterator[Tuple[str, str]]:
    """
    Yield (header, sequence) for each member of the cluster found in the
    lookup. Members missing from it are reported on stderr and skipped.
    """
    for seq in cluster.sequences:
        entry = lookup.get(seq.id)
        if entry is None:
            print(f"Warning: sequence ID {seq.id} not found in FASTA", file=sys.stderr)
            continue
        description, sequence = entry
        header = f"{seq.id} {description}" if description else seq.id
        yield header, sequence
