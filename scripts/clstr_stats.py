#!/usr/bin/env python3
import sys
import argparse
from clstr.utils import ClstrError, parse_clstr
from clstr.ops import cluster_stats, cluster_table, format_number


def main():
    parser = argparse.ArgumentParser(description="Get statistics on a CD-HIT cluster file.")
    parser.add_argument('input_file', help="Input .clstr file")
    parser.add_argument('-t', '--table', action='store_true',
                        help="Print each cluster and number of sequences per cluster")
    args = parser.parse_args()

    try:
        if args.table:
            for cluster_id, size in cluster_table(parse_clstr(args.input_file)):
                print(f"{cluster_id}\t{size}")
            return

        stats = cluster_stats(parse_clstr(args.input_file))
    except (ClstrError, OSError, UnicodeDecodeError) as e:
        print(f"clstr error: {e}", file=sys.stderr)
        sys.exit(1)

    print("Cluster count\tSequence count\tAvg seqs per cluster")
    print(f"{stats.cluster_count}\t{stats.sequence_count}\t{format_number(stats.mean_size)}")


if __name__ == "__main__":
    main()
